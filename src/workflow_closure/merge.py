"""Override-style merging of Struct metadata."""

from __future__ import annotations

from .model import Struct


def merge(source: Struct, target: Struct) -> Struct:
    """Layer `source` on top of `target`.

    The result holds the union of both key sets. Where a key is present in
    both, the value from `source` wins. The merge is shallow: a nested struct
    in `source` replaces the one in `target` wholesale.
    """

    fields = dict(target.fields)
    fields.update(source.fields)
    return Struct.of(fields)


def merge_layers(*layers: Struct | None) -> Struct:
    """Merge any number of Structs, highest priority first. `None` layers are skipped."""

    result = Struct.empty()
    for layer in reversed(layers):
        if layer is not None:
            result = merge(layer, result)
    return result
