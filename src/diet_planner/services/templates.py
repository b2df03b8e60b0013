"""Static meal templates used to fill gaps in generated plans."""

# ruff: noqa: E501

import logging
from dataclasses import dataclass
from uuid import uuid4

from diet_planner.domain.plans import DietType, Meal, MealSlot, Nutrition

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MealTemplate:
    dish_name: str
    description: str
    nutrition: Nutrition

    def to_meal(self, slot: MealSlot) -> Meal:
        return Meal(
            id=uuid4(),
            slot=slot,
            dish_name=self.dish_name,
            description=self.description,
            nutrition=self.nutrition,
        )


def _t(
    dish_name: str, description: str, calories: int, protein: int, carbs: int, fat: int
) -> MealTemplate:
    return MealTemplate(
        dish_name=dish_name,
        description=description,
        nutrition=Nutrition(
            calories=float(calories),
            protein=float(protein),
            carbs=float(carbs),
            fat=float(fat),
        ),
    )


B, L, D = MealSlot.BREAKFAST, MealSlot.LUNCH, MealSlot.DINNER
S, ES, MS = MealSlot.SNACK, MealSlot.EVENING_SNACK, MealSlot.MID_MORNING_SNACK

VEG_TEMPLATES: dict[MealSlot, tuple[MealTemplate, ...]] = {
    B: (
        _t("Vegetable Poha", "Flattened rice cooked with vegetables, nuts and spices.", 250, 8, 40, 7),
        _t("Masala Dosa with Sambar", "Rice and lentil crepe with spiced potatoes and lentil soup.", 300, 10, 45, 10),
        _t("Vegetable Upma", "Savory semolina porridge with mixed vegetables.", 240, 7, 35, 8),
    ),
    L: (
        _t("Rajma Chawal", "Kidney bean curry served with rice.", 380, 15, 60, 8),
        _t("Chole Bhature", "Spiced chickpea curry with fried bread.", 450, 18, 65, 15),
        _t("Paneer Butter Masala with Roti", "Cottage cheese in tomato gravy with whole wheat flatbread.", 420, 20, 40, 18),
    ),
    D: (
        _t("Palak Paneer with Roti", "Cottage cheese in spinach gravy with whole wheat flatbread.", 350, 18, 35, 15),
        _t("Vegetable Biryani", "Rice cooked with mixed vegetables and whole spices.", 380, 12, 55, 12),
        _t("Dal Tadka with Rice", "Tempered lentil curry served with rice.", 320, 14, 50, 6),
    ),
    S: (
        _t("Chana Chaat", "Spiced chickpea salad with tangy dressing.", 180, 9, 25, 5),
        _t("Vegetable Dhokla", "Steamed chickpea flour cake with vegetables.", 150, 7, 20, 4),
        _t("Roasted Makhana", "Roasted lotus seeds seasoned with spices.", 120, 4, 18, 3),
    ),
    ES: (
        _t("Fruit Chaat", "Mixed fruit salad with chaat masala.", 130, 2, 30, 1),
        _t("Sprouts Salad", "Mixed bean sprouts with vegetables and lemon.", 140, 8, 20, 2),
    ),
    MS: (
        _t("Masala Buttermilk", "Spiced yogurt drink with herbs.", 80, 5, 6, 3),
        _t("Multigrain Khakhra", "Thin crisp flatbread made with mixed grains.", 120, 3, 20, 3),
    ),
}

NON_VEG_TEMPLATES: dict[MealSlot, tuple[MealTemplate, ...]] = {
    B: (
        _t("Egg Bhurji with Paratha", "Spiced scrambled eggs with whole wheat flatbread.", 350, 18, 30, 16),
        _t("Chicken Keema Paratha", "Flatbread stuffed with spiced minced chicken.", 380, 22, 35, 15),
        _t("Masala Omelette with Toast", "Spiced omelette with vegetables and whole grain toast.", 320, 20, 25, 14),
    ),
    L: (
        _t("Chicken Biryani", "Rice cooked with chicken and aromatic spices.", 450, 25, 50, 15),
        _t("Fish Curry with Rice", "Tangy fish curry served with steamed rice.", 400, 28, 45, 12),
        _t("Mutton Rogan Josh with Naan", "Slow-cooked lamb curry served with flatbread.", 480, 30, 40, 20),
    ),
    D: (
        _t("Tandoori Chicken with Mint Chutney", "Roasted marinated chicken with mint sauce.", 320, 35, 8, 15),
        _t("Egg Curry with Roti", "Eggs in spiced tomato gravy with whole wheat flatbread.", 380, 22, 30, 18),
        _t("Chicken Tikka Masala with Jeera Rice", "Grilled chicken in tomato sauce with cumin rice.", 420, 28, 40, 16),
    ),
    S: (
        _t("Chicken Tikka", "Grilled marinated chicken pieces.", 180, 22, 3, 8),
        _t("Egg Roll", "Egg and vegetable wrap in whole wheat flatbread.", 220, 12, 25, 9),
        _t("Spiced Grilled Fish", "Marinated fish fillets with herbs and spices.", 160, 28, 1, 5),
    ),
    ES: (
        _t("Chicken Soup", "Clear chicken broth with vegetables.", 120, 15, 8, 3),
        _t("Egg Salad", "Boiled eggs with vegetables and light dressing.", 150, 12, 5, 10),
    ),
    MS: (
        _t("Boiled Eggs", "Boiled eggs with a sprinkle of spices.", 140, 12, 1, 10),
        _t("Chicken Sandwich", "Shredded chicken and vegetables on multigrain bread.", 220, 18, 22, 6),
    ),
}

VEGAN_TEMPLATES: dict[MealSlot, tuple[MealTemplate, ...]] = {
    B: (
        _t("Tofu Scramble", "Scrambled tofu with turmeric and vegetables.", 220, 15, 12, 14),
        _t("Quinoa Upma", "Savory quinoa porridge with mixed vegetables.", 260, 10, 40, 6),
        _t("Oatmeal with Nuts and Seeds", "Oats in plant milk topped with nuts and seeds.", 280, 12, 35, 12),
    ),
    L: (
        _t("Chickpea Curry with Brown Rice", "Spiced chickpea curry served with brown rice.", 380, 14, 65, 7),
        _t("Dal Tadka with Whole Wheat Roti", "Tempered lentil curry with whole wheat flatbread.", 340, 16, 50, 6),
        _t("Tofu and Vegetable Biryani", "Rice cooked with tofu and mixed vegetables.", 400, 18, 55, 12),
    ),
    D: (
        _t("Lentil Soup with Multigrain Bread", "Hearty lentil soup with multigrain bread.", 320, 16, 40, 8),
        _t("Tofu Tikka Masala with Cauliflower Rice", "Tofu in spiced tomato sauce with cauliflower rice.", 300, 20, 20, 16),
        _t("Vegetable Thali with Millet Roti", "Assorted vegetables and dal with millet flatbread.", 360, 14, 50, 10),
    ),
    S: (
        _t("Roasted Chickpeas", "Crispy spiced chickpeas.", 150, 8, 20, 5),
        _t("Mixed Nuts and Seeds", "Assortment of nuts and seeds.", 180, 7, 6, 16),
        _t("Vegetable Cutlets", "Spiced vegetable and lentil patties.", 140, 6, 18, 6),
    ),
    ES: (
        _t("Fruit Smoothie with Chia Seeds", "Blended fruit with plant milk and chia seeds.", 160, 5, 25, 5),
        _t("Vegetable Soup", "Clear vegetable broth with mixed vegetables.", 90, 3, 15, 2),
    ),
    MS: (
        _t("Peanut Butter on Whole Grain Crackers", "Natural peanut butter on whole grain crackers.", 170, 6, 15, 10),
        _t("Green Smoothie", "Leafy greens blended with fruit and plant milk.", 120, 4, 20, 3),
    ),
}

DEFAULT_TEMPLATE_SETS: dict[DietType, dict[MealSlot, tuple[MealTemplate, ...]]] = {
    DietType.VEG: VEG_TEMPLATES,
    DietType.NON_VEG: NON_VEG_TEMPLATES,
    DietType.VEGAN: VEGAN_TEMPLATES,
}


@dataclass
class PlanTemplateLibrary:
    """Looks up deterministic template meals by diet, slot and day."""

    template_sets: dict[DietType, dict[MealSlot, tuple[MealTemplate, ...]]]

    @classmethod
    def default(cls) -> "PlanTemplateLibrary":
        return cls(template_sets=DEFAULT_TEMPLATE_SETS)

    def template_for(
        self, diet_type: str, slot: MealSlot, day_number: int
    ) -> MealTemplate:
        """Return the template for a slot, picked by day_number modulo options.

        Diet types without their own set, "both" included, use non-veg.
        Slots missing from a set use its Snack options.
        """
        templates = self.template_sets.get(diet_type)  # type: ignore[arg-type]
        if templates is None:
            _logger.debug("No template set for diet=%s, using non-veg", diet_type)
            templates = self.template_sets[DietType.NON_VEG]
        options = templates.get(slot) or templates[MealSlot.SNACK]
        return options[day_number % len(options)]

    def meal_for(self, diet_type: str, slot: MealSlot, day_number: int) -> Meal:
        return self.template_for(diet_type, slot, day_number).to_meal(slot)
