__all__ = [
    "attribute_rules",
    "raw_text_rules",
    "tree_rules",
]
