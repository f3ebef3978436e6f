"""
Manifest merge — embedded descriptor + inferred names → one Cargo.toml model.

Precedence:
  - package block: embedded wins, else a default named after the script stem;
    a package block without an edition gets the configured one
  - dependencies: embedded entries are never overwritten; inferred names not
    already declared are added with the unresolved version ``"*"``
  - [[bin]]: embedded list wins (its first target defaults to the generated
    source path), else one target for the generated source
  - [workspace]: embedded wins, else an empty marker table

The merge is pure: inputs are not mutated and the result does not depend on
the iteration order of the inferred set.
"""
from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Dict, Iterable, Optional

from rs_script.io.schema import (
    UNRESOLVED_VERSION,
    BinTarget,
    Dependency,
    PackageDescriptor,
    PackageMeta,
)

logger = logging.getLogger(__name__)

DEFAULT_VERSION = "0.0.1"


def normalize_crate_name(name: str) -> str:
    """cargo treats ``-`` and ``_`` in crate names as the same character."""
    return name.replace("-", "_")


def default_package(source_stem: str, edition: str) -> PackageMeta:
    return PackageMeta(name=source_stem, version=DEFAULT_VERSION, edition=edition)


def default_bin(source_stem: str, source_path: Path) -> BinTarget:
    return BinTarget(name=source_stem, path=Path(source_path).as_posix())


def merge_dependencies(
    declared: Dict[str, Dependency],
    inferred: Iterable[str],
) -> Dict[str, Dependency]:
    """Declared entries as-is, plus each undeclared inferred name at ``"*"``, sorted by name."""
    merged: Dict[str, Dependency] = {
        name: spec.model_copy(deep=True) if not isinstance(spec, str) else spec
        for name, spec in declared.items()
    }
    known = {normalize_crate_name(name) for name in declared}

    for name in sorted(set(inferred)):
        if normalize_crate_name(name) in known:
            continue
        merged[name] = UNRESOLVED_VERSION
        known.add(normalize_crate_name(name))

    return dict(sorted(merged.items()))
def merge_manifest(
    rs_manifest: Optional[PackageDescriptor],
    inferred: Iterable[str],
    source_stem: str,
    source_path: Path,
    edition: str,
) -> PackageDescriptor:
    """
    Build the canonical descriptor for a generated project.

    Parameters
    ----------
    rs_manifest : PackageDescriptor, optional
        Descriptor embedded in the script, None if the script has none.
    inferred : iterable of str
        Dependency names guessed from the source.
    source_stem : str
        Script file name without extension; names the default package and bin.
    source_path : Path
        Location of the generated source copy, used by the default bin target
        and by an embedded first bin target that gives no path.
    edition : str
        Edition for a package block that does not name one.
    """
    embedded = rs_manifest if rs_manifest is not None else PackageDescriptor()

    if embedded.package is not None:
        package = embedded.package.model_copy(deep=True)
        if package.edition is None:
            package.edition = edition
    else:
        package = default_package(source_stem, edition)

    if embedded.bin:
        bins = [b.model_copy(deep=True) for b in embedded.bin]
        if bins[0].path is None:
            bins[0].path = Path(source_path).as_posix()
    else:
        bins = [default_bin(source_stem, source_path)]
    workspace = copy.deepcopy(embedded.workspace) if embedded.workspace is not None else {}

    # Tables we don't interpret ([features], [profile.*], ...) pass straight through.
    extra = copy.deepcopy(embedded.model_extra or {})

    merged = PackageDescriptor(
        package=package,
        dependencies=merge_dependencies(embedded.dependencies, inferred),
        workspace=workspace,
        bin=bins,
        **extra,
    )
    logger.debug(
        "Merged manifest: package=%s deps=%s bins=%d",
        package.name,
        merged.dependency_names(),
        len(bins),
    )
    return merged
