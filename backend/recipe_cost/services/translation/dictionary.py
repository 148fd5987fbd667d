"""
Built-in ingredient dictionaries, English name -> (localized search term, category).

Used when the persisted dictionary has no entry. Matching picks the longest key
(or localized term) contained in the cleaned name, so "cherry tomatoes" wins over
"tomatoes" and "olive oil" over "oil".
"""

import re
from typing import Mapping, Optional, Tuple

ESTONIAN_TERMS: dict[str, Tuple[str, str]] = {
    # Meat, fish and eggs
    "beef": ("veiseliha", "meat"),
    "chicken": ("kana", "meat"),
    "chicken breast": ("kanafilee", "meat"),
    "chicken thigh": ("kanakõnt", "meat"),
    "pork": ("sealiha", "meat"),
    "lamb": ("lambaliha", "meat"),
    "bacon": ("peekon", "meat"),
    "fish": ("kala", "seafood"),
    "salmon": ("lõhe", "seafood"),
    "prawns": ("krevetid", "seafood"),
    "oysters": ("austrid", "seafood"),
    "egg": ("muna", "dairy"),
    "eggs": ("munad", "dairy"),
    # Dairy
    "butter": ("või", "dairy"),
    "milk": ("piim", "dairy"),
    "cream": ("koor", "dairy"),
    "heavy cream": ("raskekoor", "dairy"),
    "sour cream": ("hapukoor", "dairy"),
    "cheese": ("juust", "dairy"),
    "parmesan": ("parmesani juust", "dairy"),
    "yogurt": ("jogurt", "dairy"),
    # Vegetables
    "onion": ("sibul", "vegetables"),
    "onions": ("sibulad", "vegetables"),
    "spring onions": ("roheline sibul", "vegetables"),
    "shallots": ("šalottsibulad", "vegetables"),
    "garlic": ("küüslauk", "vegetables"),
    "carrot": ("porgand", "vegetables"),
    "carrots": ("porgandid", "vegetables"),
    "tomato": ("tomat", "vegetables"),
    "tomatoes": ("tomatid", "vegetables"),
    "cherry tomatoes": ("kirsitomatid", "vegetables"),
    "potato": ("kartul", "vegetables"),
    "potatoes": ("kartulid", "vegetables"),
    "cabbage": ("kapsas", "vegetables"),
    "lettuce": ("salat", "vegetables"),
    "celery": ("seller", "vegetables"),
    "beetroot": ("peet", "vegetables"),
    "aubergine": ("baklažaan", "vegetables"),
    "peppers": ("paprikad", "vegetables"),
    "red pepper": ("punane paprika", "vegetables"),
    "yellow pepper": ("kollane paprika", "vegetables"),
    "green pepper": ("roheline paprika", "vegetables"),
    "chilli": ("tšilli", "vegetables"),
    "avocado": ("avokaado", "vegetables"),
    "beans": ("oad", "vegetables"),
    "cannellini beans": ("valged oad", "vegetables"),
    "peas": ("herned", "vegetables"),
    "sugar snap peas": ("suhkruherned", "vegetables"),
    "corn": ("mais", "vegetables"),
    # Fruit
    "apple": ("õun", "fruits"),
    "apples": ("õunad", "fruits"),
    "bananas": ("banaanid", "fruits"),
    "lemon": ("sidrun", "fruits"),
    "lime": ("laim", "fruits"),
    "blackberries": ("murakad", "fruits"),
    "olives": ("oliivid", "fruits"),
    # Grains and bakery
    "flour": ("jahu", "grains"),
    "plain flour": ("nisujahu", "grains"),
    "bread": ("leib", "grains"),
    "pasta": ("pasta", "grains"),
    "fettuccine": ("fettuccine pasta", "grains"),
    "linguine": ("linguine pasta", "grains"),
    "rice": ("riis", "grains"),
    "buns": ("saiakesed", "grains"),
    "tortilla": ("tortilla", "grains"),
    "pastry": ("tainas", "grains"),
    "puff pastry": ("lehttainas", "grains"),
    "biscuits": ("küpsised", "grains"),
    # Oils and condiments
    "oil": ("õli", "oils"),
    "olive oil": ("oliiviõli", "oils"),
    "vegetable oil": ("taimeõli", "oils"),
    "rapeseed oil": ("rapsiõli", "oils"),
    "vinegar": ("äädikas", "condiments"),
    "wine vinegar": ("veiniäädikas", "condiments"),
    "malt vinegar": ("linnaseäädikas", "condiments"),
    "soy sauce": ("sojakaste", "condiments"),
    "worcestershire sauce": ("worcestershire kaste", "condiments"),
    "mustard": ("sinep", "condiments"),
    "mayonnaise": ("majonees", "condiments"),
    "hot sauce": ("tšillikaste", "condiments"),
    "salsa": ("salsa", "condiments"),
    "tomato sauce": ("tomatikaste", "condiments"),
    "tomato puree": ("tomatipüree", "condiments"),
    # Spices and herbs
    "salt": ("sool", "spices"),
    "pepper": ("pipar", "spices"),
    "black pepper": ("must pipar", "spices"),
    "white pepper": ("valge pipar", "spices"),
    "cayenne pepper": ("cayenne pipar", "spices"),
    "paprika": ("paprikapulber", "spices"),
    "cumin": ("köömen", "spices"),
    "coriander": ("koriander", "spices"),
    "turmeric": ("kurkum", "spices"),
    "ginger": ("ingver", "spices"),
    "cinnamon": ("kaneel", "spices"),
    "nutmeg": ("muskaatpähkel", "spices"),
    "allspice": ("vürtspipar", "spices"),
    "cajun": ("cajun vürtsisegu", "spices"),
    "fennel": ("apteegitill", "spices"),
    "thyme": ("tüümian", "herbs"),
    "parsley": ("petersell", "herbs"),
    "basil": ("basiilik", "herbs"),
    "dill": ("till", "herbs"),
    "bay leaf": ("loorberileht", "herbs"),
    # Nuts
    "almonds": ("mandlid", "nuts"),
    "flaked almonds": ("mandlilaastud", "nuts"),
    "peanut butter": ("maapähklivõi", "nuts"),
    # Sweeteners
    "sugar": ("suhkur", "sweeteners"),
    "caster sugar": ("peensuhkur", "sweeteners"),
    "brown sugar": ("pruun suhkur", "sweeteners"),
    "demerara sugar": ("demerara suhkur", "sweeteners"),
    "honey": ("mesi", "sweeteners"),
    # Liquids
    "water": ("vesi", "liquids"),
    "wine": ("vein", "liquids"),
    "red wine": ("punane vein", "liquids"),
    "beer": ("õlu", "liquids"),
    "stout": ("tume õlu", "liquids"),
    "stock": ("puljong", "liquids"),
    "beef stock": ("veisepuljong", "liquids"),
    "chicken stock": ("kanapuljong", "liquids"),
    "vegetable stock": ("köögiviljapuljong", "liquids"),
    "coconut milk": ("kookospiim", "liquids"),
    # Baking
    "baking powder": ("küpsetuspulber", "baking"),
    "cornstarch": ("maisitärklis", "baking"),
    "corn flour": ("maisijahu", "baking"),
    "yeast": ("pärm", "baking"),
    "vanilla": ("vanill", "baking"),
    "almond extract": ("mandliessents", "baking"),
    # Specialty
    "tamarind paste": ("tamarindipasta", "specialty"),
    "scotch bonnet": ("scotch bonnet tšilli", "specialty"),
    "halloumi": ("halloumi juust", "specialty"),
    "fromage frais": ("fromage frais", "specialty"),
    "ice cream": ("jäätis", "desserts"),
}

BUILTIN_DICTIONARIES: dict[str, Mapping[str, Tuple[str, str]]] = {
    "et": ESTONIAN_TERMS,
}


def _contains_phrase(haystack: str, phrase: str) -> bool:
    return re.search(r"(?<!\w)" + re.escape(phrase) + r"(?!\w)", haystack) is not None


class BuiltinDictionary:
    def __init__(self, terms: Mapping[str, Tuple[str, str]]):
        self._terms = {key.lower(): value for key, value in terms.items()}
        # Candidates are (phrase, english key); both English keys and localized terms
        # match, longest phrase first.
        candidates = [(key, key) for key in self._terms]
        candidates += [(term.lower(), key) for key, (term, _) in self._terms.items()]
        self._candidates = sorted(set(candidates), key=lambda c: (-len(c[0]), c[0], c[1]))

    def __len__(self) -> int:
        return len(self._terms)

    def lookup(self, name: str) -> Optional[Tuple[str, str, str]]:
        """Return (english key, localized term, category) for the best match, or None."""
        cleaned = " ".join((name or "").lower().split())
        if not cleaned:
            return None
        if cleaned in self._terms:
            term, category = self._terms[cleaned]
            return cleaned, term, category
        for phrase, key in self._candidates:
            if _contains_phrase(cleaned, phrase):
                term, category = self._terms[key]
                return key, term, category
        return None


def builtin_dictionary_for(locale: Optional[str]) -> Optional[BuiltinDictionary]:
    terms = BUILTIN_DICTIONARIES.get((locale or "").lower())
    return BuiltinDictionary(terms) if terms else None
