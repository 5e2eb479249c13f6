"""
Default catalog data.

Single source of truth for the storefront menu. Each ingredient carries
its own swatch colour and prompt descriptor, so adding an ingredient
never requires touching the renderer or the prompt builder.
"""

from kebab_builder.services.catalog.base import (
    Allergen,
    Category,
    Ingredient,
    NutritionalInfo,
    SizeSpec,
)

_PHOTO = "https://images.unsplash.com/photo-{}?w=200&h=150&fit=crop"


DEFAULT_SIZES = [
    SizeSpec("small", 5.00, 15, 4, 150, "1", "Perfect for a light meal or snack"),
    SizeSpec("medium", 7.00, 20, 5, 250, "1-2", "Our most popular size, great for lunch"),
    SizeSpec("large", 9.00, 25, 6, 350, "2-3", "Hearty portion perfect for dinner"),
    SizeSpec("family", 14.00, 35, 8, 600, "3-4", "Our largest kebab, great for sharing"),
]


DEFAULT_INGREDIENTS = [
    # Tortillas (base, single selection)
    Ingredient(
        20, "White Flour Tortilla", Category.TORTILLA, 0.00, 3.2, 50,
        _PHOTO.format("1565299624946-b28f40a0ca4b"),
        "Classic soft white flour tortilla",
        color="#F5E6D3", visual_description="soft white flour tortilla",
        allergens=(Allergen.GLUTEN,),
        nutritional_info=NutritionalInfo(150, 25, 3.5, 1.0, 300),
    ),
    Ingredient(
        21, "Whole Wheat Tortilla", Category.TORTILLA, 0.50, 4.1, 55,
        _PHOTO.format("1626191466257-a9e4329fdc5c"),
        "Healthy whole wheat tortilla",
        color="#D4A574", visual_description="brown whole wheat tortilla",
        allergens=(Allergen.GLUTEN,),
        nutritional_info=NutritionalInfo(140, 22, 3.5, 3.5, 280),
    ),
    Ingredient(
        22, "Spinach Tortilla", Category.TORTILLA, 0.75, 3.8, 52,
        _PHOTO.format("1623664788841-0c4a2e4ac2e5"),
        "Green spinach flavored tortilla",
        color="#9ACD32", visual_description="green spinach tortilla",
        allergens=(Allergen.GLUTEN,),
        nutritional_info=NutritionalInfo(145, 24, 3.5, 1.5, 290),
    ),
    Ingredient(
        23, "Tomato Tortilla", Category.TORTILLA, 0.75, 3.5, 53,
        _PHOTO.format("1615842974426-55c372fd8d8b"),
        "Red tomato tortilla",
        color="#FF6347", visual_description="red tomato tortilla",
        allergens=(Allergen.GLUTEN,),
        nutritional_info=NutritionalInfo(145, 24, 3.5, 1.5, 310),
    ),

    # Proteins
    Ingredient(
        1, "Chicken Breast", Category.PROTEIN, 4.50, 25.4, 120,
        _PHOTO.format("1532550907401-a500c9a57435"),
        "Grilled chicken breast strips",
        color="#F4A261", visual_description="golden grilled chicken breast strips",
        nutritional_info=NutritionalInfo(198, 0, 4.3, 0, 90),
    ),
    Ingredient(
        2, "Lamb Meat", Category.PROTEIN, 6.00, 22.8, 110,
        _PHOTO.format("1529692236671-f1f6cf9683ba"),
        "Tender lamb kebab meat",
        color="#E63946", visual_description="tender sliced lamb doner meat",
        nutritional_info=NutritionalInfo(280, 0, 20, 0, 80),
    ),
    Ingredient(
        3, "Beef Kebab", Category.PROTEIN, 5.50, 24.6, 115,
        _PHOTO.format("1546833999-b9f581a1996d"),
        "Seasoned beef kebab",
        color="#8B2635", visual_description="seasoned charred beef kebab slices",
        nutritional_info=NutritionalInfo(250, 0, 17, 0, 75),
    ),
    Ingredient(
        4, "Mixed Meat", Category.PROTEIN, 5.75, 24.1, 125,
        _PHOTO.format("1555939594-58d7cb561ad1"),
        "Chicken and lamb mix",
        color="#DC2626", visual_description="mixed chicken and lamb meat",
        nutritional_info=NutritionalInfo(265, 0, 13, 0, 85),
    ),

    # Vegetables
    Ingredient(
        5, "Lettuce", Category.VEGETABLE, 0.50, 1.2, 30,
        _PHOTO.format("1556909114-4f7a0cb94ac4"),
        "Fresh crispy lettuce",
        color="#2D6A2D", visual_description="crisp shredded green lettuce",
        nutritional_info=NutritionalInfo(5, 1.0, 0.1, 0.6, 8),
    ),
    Ingredient(
        6, "Tomatoes", Category.VEGETABLE, 0.75, 0.9, 40,
        _PHOTO.format("1546094096-0df4bcaaa337"),
        "Fresh sliced tomatoes",
        color="#DC2626", visual_description="juicy red tomato slices",
        nutritional_info=NutritionalInfo(7, 1.6, 0.1, 0.5, 2),
    ),
    Ingredient(
        7, "Onions", Category.VEGETABLE, 0.50, 1.1, 25,
        _PHOTO.format("1518977676601-b53f82aba655"),
        "Red onions",
        color="#FBBF24", visual_description="thin red onion rings",
        nutritional_info=NutritionalInfo(10, 2.3, 0, 0.4, 1),
    ),
    Ingredient(
        8, "Cucumbers", Category.VEGETABLE, 0.60, 0.7, 35,
        _PHOTO.format("1449300079323-02e209d9d3a6"),
        "Fresh cucumbers",
        color="#059669", visual_description="fresh cucumber slices",
        nutritional_info=NutritionalInfo(5, 1.3, 0, 0.2, 1),
    ),
    Ingredient(
        9, "Peppers", Category.VEGETABLE, 0.80, 1.0, 45,
        _PHOTO.format("1563565375-f3fdfdbefa83"),
        "Mixed bell peppers",
        color="#EAB308", visual_description="colourful bell pepper strips",
        nutritional_info=NutritionalInfo(14, 2.7, 0.1, 0.9, 2),
    ),
    Ingredient(
        10, "Pickles", Category.VEGETABLE, 0.40, 0.3, 20,
        _PHOTO.format("1571167635670-3942fb6d4bdc"),
        "Tangy pickles",
        color="#22C55E", visual_description="tangy green pickle slices",
        nutritional_info=NutritionalInfo(2, 0.4, 0, 0.2, 240),
    ),

    # Sauces
    Ingredient(
        11, "Garlic Sauce", Category.SAUCE, 0.30, 0.5, 15,
        _PHOTO.format("1472476443507-c7a5948772fc"),
        "Creamy garlic sauce",
        color="#F3F4F6", visual_description="drizzle of creamy white garlic sauce",
        allergens=(Allergen.EGGS,),
        nutritional_info=NutritionalInfo(90, 1.0, 9.5, 0, 95),
    ),
    Ingredient(
        12, "Chili Sauce", Category.SAUCE, 0.30, 0.2, 12,
        _PHOTO.format("1578662996442-48f60103fc96"),
        "Spicy chili sauce",
        color="#B91C1C", visual_description="spicy red chili sauce",
        nutritional_info=NutritionalInfo(12, 2.5, 0.1, 0.3, 180),
    ),
    Ingredient(
        13, "Yogurt Sauce", Category.SAUCE, 0.40, 2.1, 18,
        _PHOTO.format("1571197019966-4acc94ba5cd8"),
        "Cool yogurt sauce",
        color="#F8FAFC", visual_description="cool yogurt sauce",
        allergens=(Allergen.DAIRY,),
        nutritional_info=NutritionalInfo(25, 1.5, 1.3, 0, 20),
    ),
    Ingredient(
        14, "Tahini", Category.SAUCE, 0.50, 5.8, 20,
        _PHOTO.format("1609501676725-7186f0932175"),
        "Sesame tahini sauce",
        color="#D97706", visual_description="nutty sesame tahini drizzle",
        nutritional_info=NutritionalInfo(120, 4.2, 10.8, 2.3, 7),
    ),
    Ingredient(
        15, "Hummus", Category.SAUCE, 0.60, 4.9, 25,
        _PHOTO.format("1541592106381-b31e9677c0e5"),
        "Creamy hummus",
        color="#D2B48C", visual_description="smooth creamy hummus",
        nutritional_info=NutritionalInfo(42, 3.5, 2.4, 1.5, 95),
    ),

    # Extras
    Ingredient(
        16, "Extra Cheese", Category.EXTRA, 1.00, 8.2, 30,
        _PHOTO.format("1486297678162-eb2a19b0a32d"),
        "Melted cheese",
        color="#FFD700", visual_description="melted golden cheese",
        allergens=(Allergen.DAIRY,),
        nutritional_info=NutritionalInfo(120, 0.4, 10, 0, 190),
    ),
    Ingredient(
        17, "French Fries", Category.EXTRA, 2.00, 2.8, 80,
        _PHOTO.format("1573080496219-bb080dd4f877"),
        "Crispy fries inside",
        color="#F4A460", visual_description="crispy golden french fries",
        nutritional_info=NutritionalInfo(250, 33, 12, 3.0, 170),
    ),
    Ingredient(
        18, "Grilled Halloumi", Category.EXTRA, 2.50, 11.2, 60,
        _PHOTO.format("1631452180519-c014fe946bc7"),
        "Grilled halloumi cheese",
        color="#FFFACD", visual_description="grill-marked halloumi slices",
        allergens=(Allergen.DAIRY,),
        nutritional_info=NutritionalInfo(190, 1.0, 15, 0, 700),
    ),
    Ingredient(
        19, "Extra Meat", Category.EXTRA, 3.00, 15.6, 100,
        _PHOTO.format("1555939594-58d7cb561ad1"),
        "Double portion of meat",
        color="#8B4513", visual_description="a double portion of meat",
        nutritional_info=NutritionalInfo(230, 0, 14, 0, 80),
    ),
]


# Preset combinations offered on the builder landing page
POPULAR_COMBOS = [
    {
        "id": 1,
        "name": "Classic Chicken Kebab",
        "size": "medium",
        "ingredients": [20, 1, 5, 6, 7, 11, 13],
        "description": "Our most popular chicken kebab with fresh vegetables and creamy sauces",
    },
    {
        "id": 2,
        "name": "Spicy Lamb Special",
        "size": "large",
        "ingredients": [23, 2, 5, 6, 9, 12, 14],
        "description": "For those who like it hot! Lamb with spicy peppers and chili sauce",
    },
    {
        "id": 3,
        "name": "Vegetarian Delight",
        "size": "medium",
        "ingredients": [22, 5, 6, 7, 8, 9, 15, 18],
        "description": "Perfect for vegetarians with grilled halloumi and fresh vegetables",
    },
    {
        "id": 4,
        "name": "Meat Lovers",
        "size": "large",
        "ingredients": [21, 4, 6, 7, 11, 16, 19],
        "description": "Double meat portion with cheese for the ultimate protein experience",
    },
]
