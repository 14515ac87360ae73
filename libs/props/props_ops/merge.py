"""Template merge engine.

Position and value are decided separately:

* position comes from which side contributed a key under the positioning mode
  (existing keys below/above the template keys, or dropped entirely);
* value comes afterwards from the override policy, so a key can keep the
  document's own value while moving to the template's slot.

Documents are processed one at a time; a failing document is logged and
counted, never raised.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import FrozenSet, Iterable, List, Optional, Sequence

from .cache import PropertyCache
from .codec import PropertySet, restore
from .header import replace_header
from .serializer import prepare_for_write, render_header
from .store import DocumentStore
from .types import BatchReport

logger = logging.getLogger(__name__)


class Positioning(str, Enum):
    BELOW = "below"  # existing keys first, template keys after
    ABOVE = "above"
    REMOVE = "remove"  # template keys only

    @classmethod
    def parse(cls, name: "str | Positioning") -> "Positioning":
        if isinstance(name, Positioning):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            raise ValueError(f"unknown positioning: {name!r}") from None


@dataclass(frozen=True)
class MergePolicy:
    positioning: Positioning = Positioning.BELOW
    override_all: bool = True
    override_keys: FrozenSet[str] = frozenset()

    def uses_template(self, key: str) -> bool:
        return self.override_all or key in self.override_keys

    @classmethod
    def from_choices(
        cls,
        selected_keys: Iterable[str],
        positioning: "str | Positioning" = Positioning.BELOW,
        override_all: bool = True,
        preserve_all: bool = False,
        override_keys: Iterable[str] = (),
        preserve_keys: Iterable[str] = (),
    ) -> "MergePolicy":
        """Collapse override/preserve choices into one explicit policy.

        Precedence, highest first: a per-key preserve, a per-key override,
        ``preserve_all``, ``override_all``.
        """
        preserve = set(preserve_keys)
        override = set(override_keys)
        chosen = set()
        for key in selected_keys:
            if key in preserve:
                continue
            if key in override:
                chosen.add(key)
            elif override_all and not preserve_all:
                chosen.add(key)
        return cls(
            positioning=Positioning.parse(positioning),
            override_all=False,
            override_keys=frozenset(chosen),
        )


def compose(
    template_props: PropertySet,
    selected_keys: Sequence[str],
    existing: PropertySet,
    policy: MergePolicy,
) -> PropertySet:
    """Compute the final ordered property set for one document."""
    selected: List[str] = list(dict.fromkeys(selected_keys))
    selected_set = set(selected)

    from_template = [(k, template_props[k]) for k in selected if k in template_props]
    # a selected key the template lacks stays where the document has it
    from_existing = [(k, v) for k, v in existing.items() if k not in selected_set or k not in template_props]

    if policy.positioning is Positioning.BELOW:
        skeleton = from_existing + from_template
    elif policy.positioning is Positioning.ABOVE:
        skeleton = from_template + from_existing
    else:
        skeleton = from_template + [(k, v) for k, v in from_existing if k in selected_set]

    merged: PropertySet = dict(skeleton)
    for key in selected:
        if key in merged and key in existing and not policy.uses_template(key):
            merged[key] = existing[key]
    return merged


def same_document(a: Path | str, b: Path | str) -> bool:
    return Path(a).resolve() == Path(b).resolve()


async def write_properties(store: DocumentStore, doc: Path, props: PropertySet, text: Optional[str] = None) -> None:
    """Restore, flatten, serialize and splice ``props`` into ``doc``.

    ``text`` is the document as last read; it is fetched from the store when omitted.
    """
    header = render_header(prepare_for_write(restore(props)))
    if text is None:
        text = await store.read(doc)
    await store.write(doc, replace_header(text, header))


async def apply_template(
    store: DocumentStore,
    template_doc: Path | str,
    target_docs: Iterable[Path | str],
    selected_keys: Sequence[str],
    policy: Optional[MergePolicy] = None,
    cache: Optional[PropertyCache] = None,
) -> BatchReport:
    if not selected_keys:
        logger.warning("no properties selected, nothing to apply from %s", template_doc)
        return BatchReport()
    policy = policy or MergePolicy()
    cache = cache or PropertyCache(store)
    template_doc = Path(template_doc)
    targets: List[Path] = []
    for doc in target_docs:
        if same_document(doc, template_doc):
            logger.debug("skipping template document %s", doc)
            continue
        targets.append(Path(doc))
    report = BatchReport()

    try:
        template_props = await cache.get(template_doc)
    except Exception as e:
        logger.error("cannot read template %s: %s", template_doc, e)
        for doc in targets:
            report.record(doc, False, f"template unreadable: {e}")
        return report

    missing = [k for k in selected_keys if k not in template_props]
    if missing:
        logger.warning("template %s lacks selected keys: %s", template_doc, ", ".join(missing))

    for doc in targets:
        try:
            existing = await cache.get(doc)
            merged = compose(template_props, selected_keys, existing, policy)
            await write_properties(store, doc, merged, await cache.text(doc))
            cache.invalidate(doc)
            report.record(doc, True)
        except Exception as e:
            logger.error("failed to apply template to %s: %s", doc, e)
            report.record(doc, False, str(e))

    logger.info("applied template %s to %s documents", template_doc, report.summary())
    return report
