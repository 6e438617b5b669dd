"""Small helpers shared by the converters."""

from elementalify.utils.ids import id_generator, new_node_id

__all__ = [
    "id_generator",
    "new_node_id",
]
