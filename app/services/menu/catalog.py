"""
Static Menu Catalog

The fixed 8-item menu served for ``type=static`` and whenever the live
(LLM-generated) menu cannot be produced. Also the default working set of the
assistant's vector store.
"""

from app.schemas import MenuItem


STATIC_MENU: tuple[MenuItem, ...] = (
    MenuItem(
        id=1,
        name="Classic Margherita Pizza",
        description="Fresh mozzarella, tomato sauce, basil, and olive oil",
        price=14.99,
        image="https://images.unsplash.com/photo-1574071318508-1cdbab80d002?w=400&h=300&fit=crop",
        ingredients="Pizza dough, San Marzano tomatoes, fresh mozzarella, basil, extra virgin olive oil",
        category="Pizza",
        dietary=["vegetarian"],
        spice_level=0,
    ),
    MenuItem(
        id=2,
        name="BBQ Bacon Burger",
        description="Angus beef patty, crispy bacon, cheddar, BBQ sauce, onion rings",
        price=13.50,
        image="https://images.unsplash.com/photo-1553979459-d2229ba7433b?w=400&h=300&fit=crop",
        ingredients="Angus beef, bacon, cheddar, brioche bun, BBQ sauce, onion rings",
        category="Burgers",
        spice_level=1,
    ),
    MenuItem(
        id=3,
        name="Caesar Salad",
        description="Romaine lettuce, parmesan, croutons, Caesar dressing",
        price=9.99,
        image="https://images.unsplash.com/photo-1546793665-c74683f339c1?w=400&h=300&fit=crop",
        ingredients="Romaine lettuce, parmesan, garlic croutons, anchovy Caesar dressing",
        category="Salads",
        spice_level=0,
    ),
    MenuItem(
        id=4,
        name="Chicken Tikka Masala",
        description="Tender chicken in creamy tomato curry sauce with basmati rice",
        price=16.99,
        image="https://images.unsplash.com/photo-1565557623262-b51c2513a641?w=400&h=300&fit=crop",
        ingredients="Chicken thigh, yogurt marinade, tomato, cream, garam masala, basmati rice",
        category="Curries",
        dietary=["gluten-free"],
        spice_level=2,
    ),
    MenuItem(
        id=5,
        name="Fish Tacos",
        description="Grilled mahi-mahi, cabbage slaw, lime crema, three soft tortillas",
        price=12.99,
        image="https://images.unsplash.com/photo-1551504734-5ee1c4a1479b?w=400&h=300&fit=crop",
        ingredients="Mahi-mahi, corn tortillas, red cabbage, lime crema, cilantro, jalapeno",
        category="Tacos",
        dietary=["pescatarian"],
        spice_level=1,
    ),
    MenuItem(
        id=6,
        name="Pad Thai",
        description="Rice noodles, shrimp, peanuts, bean sprouts, tamarind sauce",
        price=13.99,
        image="https://images.unsplash.com/photo-1559314809-0d155014e29e?w=400&h=300&fit=crop",
        ingredients="Rice noodles, shrimp, egg, peanuts, bean sprouts, tamarind, fish sauce, chili",
        category="Noodles",
        dietary=["pescatarian", "dairy-free"],
        spice_level=2,
    ),
    MenuItem(
        id=7,
        name="Lobster Mac & Cheese",
        description="Creamy four-cheese sauce with chunks of fresh lobster",
        price=22.99,
        image="https://images.unsplash.com/photo-1476124369491-f51a157fc5ea?w=400&h=300&fit=crop",
        ingredients="Elbow macaroni, lobster, cheddar, gruyere, fontina, parmesan, breadcrumbs",
        category="Entrees",
        dietary=["pescatarian"],
        spice_level=0,
    ),
    MenuItem(
        id=8,
        name="Chocolate Lava Cake",
        description="Warm chocolate cake with molten center, vanilla ice cream",
        price=8.99,
        image="https://images.unsplash.com/photo-1624353365286-3f8d62daad51?w=400&h=300&fit=crop",
        ingredients="Dark chocolate, butter, eggs, sugar, flour, vanilla ice cream",
        category="Desserts",
        dietary=["vegetarian"],
        spice_level=0,
    ),
)
