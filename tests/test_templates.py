"""Tests for the template meal library."""

from diet_planner.domain.plans import DietType, MealSlot
from diet_planner.services.templates import PlanTemplateLibrary


def test_template_rotates_by_day_number() -> None:
    library = PlanTemplateLibrary.default()

    first = library.template_for(DietType.VEG, MealSlot.BREAKFAST, 1)
    third = library.template_for(DietType.VEG, MealSlot.BREAKFAST, 3)

    assert first.dish_name == "Masala Dosa with Sambar"
    assert third.dish_name == "Vegetable Poha"


def test_template_snack_for_day_three() -> None:
    library = PlanTemplateLibrary.default()

    template = library.template_for(DietType.VEG, MealSlot.SNACK, 3)

    assert template.dish_name == "Chana Chaat"
    assert template.nutrition.calories == 180


def test_both_diet_uses_non_veg_set() -> None:
    library = PlanTemplateLibrary.default()

    both = library.template_for(DietType.BOTH, MealSlot.LUNCH, 2)
    non_veg = library.template_for(DietType.NON_VEG, MealSlot.LUNCH, 2)

    assert both == non_veg


def test_vegan_set_is_available() -> None:
    library = PlanTemplateLibrary.default()

    template = library.template_for(DietType.VEGAN, MealSlot.BREAKFAST, 1)

    assert template.dish_name == "Quinoa Upma"


def test_missing_slot_falls_back_to_snack_options() -> None:
    library = PlanTemplateLibrary(
        template_sets={
            DietType.NON_VEG: {
                MealSlot.SNACK: PlanTemplateLibrary.default().template_sets[
                    DietType.VEG
                ][MealSlot.SNACK]
            }
        }
    )

    template = library.template_for(DietType.NON_VEG, MealSlot.EVENING_SNACK, 3)

    assert template.dish_name == "Chana Chaat"


def test_meal_for_assigns_fresh_ids() -> None:
    library = PlanTemplateLibrary.default()

    first = library.meal_for(DietType.VEG, MealSlot.DINNER, 1)
    second = library.meal_for(DietType.VEG, MealSlot.DINNER, 1)

    assert first.slot == MealSlot.DINNER
    assert first.dish_name == second.dish_name
    assert first.id != second.id
    assert first.eaten is False
