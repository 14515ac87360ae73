from .api import (
    props_apply,
    props_apply_template,
    props_bulk_edit,
    props_find_template,
    props_read,
    props_reorder,
    props_resolve_templates,
    props_scan,
)
from .aggregate import apply_property_order, check_reorder, infer_display_type, scan
from .cache import PropertyCache
from .codec import (
    DisplayType,
    PropertySet,
    TaggedProperty,
    TypeTag,
    convert_value,
    detect_display_type,
    restore,
    tag,
)
from .edit import apply_properties, bulk_edit
from .merge import MergePolicy, Positioning, apply_template, compose
from .selection import DirectorySource, DocumentSource, resolve_templates
from .serializer import render_header, serialize
from .store import DocumentStore, FileDocumentStore
from .types import AggregateEntry, BatchReport, ReorderVerdict
