from .collector import AssetCollector, Category, CategoryReport, default_categories
from .fonts import FontDescriptor, derive_font_base_name, normalize_face_label, read_font_descriptor
from .names import resolve_collision_free, sanitize_base_name
from .staging import StagedAsset, StagedFile, stage_file

__all__ = [
    "AssetCollector",
    "Category",
    "CategoryReport",
    "default_categories",
    "FontDescriptor",
    "derive_font_base_name",
    "normalize_face_label",
    "read_font_descriptor",
    "resolve_collision_free",
    "sanitize_base_name",
    "StagedAsset",
    "StagedFile",
    "stage_file",
]
