"""Tests for the shopping list."""

from fridgechef.services.shopping_list import ShoppingList


def test_add_appends_new_items_in_order():
    shopping = ShoppingList()
    assert shopping.add(["Milk", "Eggs"]) == ["Milk", "Eggs"]
    assert shopping.add(["Eggs", "Butter", "Milk", "Flour"]) == ["Butter", "Flour"]
    assert shopping.items == ["Milk", "Eggs", "Butter", "Flour"]


def test_add_is_idempotent():
    shopping = ShoppingList()
    shopping.add(["Milk", "Milk", "Eggs"])
    first = shopping.items
    assert shopping.add(["Milk", "Eggs"]) == []
    assert shopping.items == first == ["Milk", "Eggs"]


def test_matching_is_case_sensitive():
    shopping = ShoppingList()
    shopping.add(["milk", "Milk"])
    assert len(shopping) == 2


def test_remove_deletes_exactly_one_item():
    shopping = ShoppingList()
    shopping.add(["Milk", "Eggs", "Butter"])
    assert shopping.remove("Eggs") is True
    assert shopping.items == ["Milk", "Butter"]
    assert "Eggs" not in shopping


def test_remove_missing_item():
    shopping = ShoppingList()
    shopping.add(["Milk"])
    assert shopping.remove("Bread") is False
    assert shopping.items == ["Milk"]


def test_items_is_a_copy():
    shopping = ShoppingList()
    shopping.add(["Milk"])
    shopping.items.append("Bread")
    assert shopping.items == ["Milk"]
