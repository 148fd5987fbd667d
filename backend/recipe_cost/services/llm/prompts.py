INGREDIENT_TRANSLATE_PROMPT_VERSION = "v1"

INGREDIENT_TRANSLATE_TEMPLATE = """Translate a recipe ingredient name into the search term a shopper would type
into a grocery web shop of the target language.

Return:
- translated: the product name in the target language, lower case, singular unless the product
  is sold under its plural name. No quantities, no brand names, no explanations.
- category: one of meat | seafood | dairy | vegetables | fruits | grains | oils | condiments |
  spices | herbs | nuts | sweeteners | liquids | baking | specialty | unknown
- confidence: high | medium | low | failed

Rules:
1) Translate the grocery product, not the dish: "chicken breast" -> the cut sold in stores.
2) Keep generic names generic: "cheese" stays the generic word for cheese.
3) If the name is not food, or you do not know the term, return confidence=failed.
"""

# Locale -> language name given to the model.
LANGUAGE_NAMES = {
    "et": "Estonian",
    "de": "German",
    "fr": "French",
    "it": "Italian",
    "es": "Spanish",
    "lv": "Latvian",
    "lt": "Lithuanian",
    "fi": "Finnish",
}
