"""Sample schemas and test doubles shared by the test modules."""

from typing import Optional


def source_tables():
    return {
        "eav_attribute_set": [
            {"attribute_set_id": 4, "entity_type_id": 4, "attribute_set_name": "Default", "sort_order": 1},
            {"attribute_set_id": 10, "entity_type_id": 4, "attribute_set_name": "Shoes", "sort_order": 2},
        ],
        "eav_attribute_group": [
            {"attribute_group_id": 7, "attribute_set_id": 4, "attribute_group_name": "General", "sort_order": 1},
            {"attribute_group_id": 11, "attribute_set_id": 10, "attribute_group_name": "General", "sort_order": 1},
        ],
        "eav_attribute": [
            {"attribute_id": 70, "entity_type_id": 4, "attribute_code": "name", "frontend_label": "Name", "is_legacy": 0},
            {"attribute_id": 71, "entity_type_id": 4, "attribute_code": "color", "frontend_label": "Color", "is_legacy": 0},
            {"attribute_id": 72, "entity_type_id": 4, "attribute_code": "legacy_flag", "frontend_label": "Flag", "is_legacy": 1},
        ],
        "eav_entity_attribute": [
            {"entity_attribute_id": 1, "entity_type_id": 4, "attribute_set_id": 4, "attribute_group_id": 7, "attribute_id": 70, "sort_order": 1},
            {"entity_attribute_id": 2, "entity_type_id": 4, "attribute_set_id": 10, "attribute_group_id": 11, "attribute_id": 71, "sort_order": 2},
        ],
        "catalog_eav_attribute": [
            {"attribute_id": 70, "is_global": 1},
            {"attribute_id": 71, "is_global": 0},
        ],
        "eav_entity_type": [
            {"entity_type_id": 4, "entity_type_code": "catalog_product", "default_attribute_set_id": 4},
        ],
    }


def destination_tables():
    return {
        "eav_attribute_set": [
            {"attribute_set_id": 9, "entity_type_id": 4, "attribute_set_name": "Default", "sort_order": 3, "foo": "bar"},
            {"attribute_set_id": 12, "entity_type_id": 4, "attribute_set_name": "Bags", "sort_order": 4, "foo": "baz"},
        ],
        "eav_attribute_group": [
            {"attribute_group_id": 20, "attribute_set_id": 9, "attribute_group_name": "General", "sort_order": 1, "tab_group_code": "basic"},
            {"attribute_group_id": 21, "attribute_set_id": 12, "attribute_group_name": "Bag Details", "sort_order": 2, "tab_group_code": "advanced"},
        ],
        "eav_attribute": [
            {"attribute_id": 100, "entity_type_id": 4, "attribute_code": "name", "frontend_label": "Product Name", "is_filterable_in_grid": 1},
            {"attribute_id": 101, "entity_type_id": 4, "attribute_code": "gallery", "frontend_label": "Gallery", "is_filterable_in_grid": 0},
        ],
        "eav_entity_attribute": [
            {"entity_attribute_id": 50, "entity_type_id": 4, "attribute_set_id": 9, "attribute_group_id": 20, "attribute_id": 100, "sort_order": 5},
            {"entity_attribute_id": 51, "entity_type_id": 4, "attribute_set_id": 12, "attribute_group_id": 21, "attribute_id": 101, "sort_order": 6},
            {"entity_attribute_id": 52, "entity_type_id": 4, "attribute_set_id": 9, "attribute_group_id": 20, "attribute_id": 999, "sort_order": 7},
            {"entity_attribute_id": 53, "entity_type_id": 4, "attribute_set_id": 9, "attribute_group_id": 20, "attribute_id": 101, "sort_order": 8},
        ],
        "catalog_eav_attribute": [
            {"attribute_id": 100, "is_global": 2, "used_in_grid": 1},
            {"attribute_id": 101, "is_global": 1, "used_in_grid": 0},
        ],
        "eav_entity_type": [
            {"entity_type_id": 4, "entity_type_code": "catalog_product", "default_attribute_set_id": 9},
            {"entity_type_id": 9, "entity_type_code": "customer", "default_attribute_set_id": 12},
        ],
    }


def rows_by(store, table, field):
    return {row[field]: row for row in store.get_rows(table)}


class CountingProgress:
    """Progress sink that records the calls it receives."""

    def __init__(self):
        self.total_steps: Optional[int] = None
        self.steps = 0
        self.finished = False

    def start(self, total_steps: int) -> None:
        self.total_steps = total_steps
        self.steps = 0
        self.finished = False

    def advance(self) -> None:
        self.steps += 1

    def finish(self) -> None:
        self.finished = True
