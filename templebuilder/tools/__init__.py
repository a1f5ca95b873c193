# Placement math, grouping and project file helpers.

from templebuilder.tools.catalog import (
    MATERIALS,
    SHAPES,
    get_material,
    get_shape_details,
    list_materials,
    list_shapes,
)

from templebuilder.tools.transform_utils import (
    footprint,
    normalize_rotation,
    normalize_scale,
    physical_height,
)

from templebuilder.tools.contact_resolver import resolve_contact

from templebuilder.tools.structure_grouper import (
    create_structure,
    expand_group,
    instantiate,
)

from templebuilder.tools.project_io import (
    dump_project,
    load_project_file,
    parse_project,
    save_project_file,
)

__all__ = [
    # Catalog
    "MATERIALS",
    "SHAPES",
    "get_material",
    "get_shape_details",
    "list_materials",
    "list_shapes",
    # Transform utilities
    "footprint",
    "normalize_rotation",
    "normalize_scale",
    "physical_height",
    # Contact resolution
    "resolve_contact",
    # Grouping
    "create_structure",
    "expand_group",
    "instantiate",
    # Project files
    "dump_project",
    "load_project_file",
    "parse_project",
    "save_project_file",
]
