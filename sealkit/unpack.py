"""Safe extraction of zstd-compressed tarballs.

Entries are read sequentially from the decompressed stream and written under
a destination root. Stored paths go through :func:`sealkit.pathutil.sanitize`
first; anything that would land outside the root is skipped rather than
treated as an error, so one hostile entry cannot block the legitimate ones.
Only I/O failures on an accepted entry abort the extraction.
"""

from __future__ import annotations

import errno
import logging
import os
import shutil
import tarfile
from dataclasses import dataclass
from typing import BinaryIO, Generator, List, Optional, Tuple

from .codec import open_zstd_stream
from .constants import COPY_BUFSIZE, MODE_MASK
from .errors import ArchiveFormatError, ExtractError
from .pathutil import is_within, sanitize, symlink_target_is_contained

logger = logging.getLogger(__name__)

KIND_FILE = 0
KIND_DIR = 1
KIND_SYMLINK = 2
KIND_HARDLINK = 3
KIND_OTHER = 4

_UNSUPPORTED_SYMLINK_ERRNOS = {errno.EPERM, errno.EOPNOTSUPP}
if hasattr(errno, "ENOTSUP"):
    _UNSUPPORTED_SYMLINK_ERRNOS.add(errno.ENOTSUP)


@dataclass
class ArchiveEntry:
    path: str
    kind: int
    mode: Optional[int] = None
    mtime: Optional[float] = None
    size: int = 0
    linkname: Optional[str] = None


def _entry_from_member(member: tarfile.TarInfo) -> ArchiveEntry:
    if member.isreg():
        kind = KIND_FILE
    elif member.isdir():
        kind = KIND_DIR
    elif member.issym():
        kind = KIND_SYMLINK
    elif member.islnk():
        kind = KIND_HARDLINK
    else:
        kind = KIND_OTHER
    return ArchiveEntry(
        path=member.name,
        kind=kind,
        mode=member.mode,
        mtime=member.mtime,
        size=member.size if kind == KIND_FILE else 0,
        linkname=member.linkname or None,
    )


def iter_entries(contents: bytes) -> Generator[Tuple[ArchiveEntry, Optional[BinaryIO]], None, None]:
    """Yield ``(entry, reader)`` pairs in container order.

    ``reader`` is set for regular files only and is valid until the next
    entry is requested; the underlying stream cannot be rewound.

    Raises:
        DecodeError: ``contents`` is not valid zstd.
        ArchiveFormatError: the tar structure is corrupt.
    """
    stream = open_zstd_stream(contents)
    try:
        # An empty decompressed payload is an archive with no entries
        if stream.empty():
            return
        try:
            tar = tarfile.open(fileobj=stream, mode="r|")  # type: ignore[call-overload]
        except tarfile.TarError as e:
            raise ArchiveFormatError(f"invalid tar archive: {e}") from e
        with tar:
            while True:
                try:
                    member = tar.next()
                except tarfile.TarError as e:
                    raise ArchiveFormatError(f"invalid tar archive: {e}") from e
                if member is None:
                    break
                entry = _entry_from_member(member)
                reader = None
                if entry.kind == KIND_FILE:
                    reader = tar.extractfile(member)
                    if reader is None:
                        raise ArchiveFormatError(f"no data for regular member {member.name!r}")
                yield entry, reader
    finally:
        stream.close()


def _read_member(reader: BinaryIO, size: int) -> bytes:
    try:
        return reader.read(size)
    except tarfile.TarError as e:
        raise ArchiveFormatError(f"truncated or corrupt member data: {e}") from e


def _ensure_parent(path: str) -> None:
    """Best-effort parent directory creation; failures surface later when writing."""
    parent = os.path.dirname(path)
    try:
        os.makedirs(parent, exist_ok=True)
    except OSError as exc:
        logger.debug("could not create %s: %s", parent, exc)


def _safe_chmod(path: str, mode: Optional[int]) -> None:
    if mode is None:
        return
    try:
        os.chmod(path, mode & MODE_MASK)
    except OSError as exc:
        logger.warning("failed to set mode on %s: %s", path, exc)


def _safe_utime(path: str, mtime: Optional[float]) -> None:
    if mtime is None:
        return
    try:
        os.utime(path, (mtime, mtime), follow_symlinks=False)
    except (OSError, NotImplementedError) as exc:
        logger.debug("failed to set timestamps on %s: %s", path, exc)


def _remove_existing(path: str) -> None:
    # Replace files and links; directories are left for the write to fail on.
    if os.path.islink(path) or os.path.isfile(path):
        os.unlink(path)


def _write_file(path: str, reader: BinaryIO) -> None:
    _remove_existing(path)
    with open(path, "wb") as wf:
        while True:
            chunk = _read_member(reader, COPY_BUFSIZE)
            if not chunk:
                break
            wf.write(chunk)


def _write_symlink(path: str, target: str) -> bool:
    if os.path.lexists(path) and not (os.path.isdir(path) and not os.path.islink(path)):
        os.unlink(path)
    try:
        os.symlink(target, path)
    except (NotImplementedError, AttributeError):
        logger.warning("symlinks not supported; skipping %s", path)
        return False
    except OSError as exc:
        if exc.errno in _UNSUPPORTED_SYMLINK_ERRNOS:
            logger.warning("symlinks not supported; skipping %s", path)
            return False
        raise
    return True


def _write_hardlink(path: str, source: str) -> None:
    _remove_existing(path)
    try:
        os.link(source, path)
    except OSError:
        shutil.copy2(source, path)


def _drop_escaping_links(root: str, links: List[str]) -> None:
    """Remove extracted symlinks that resolve outside ``root``.

    A link that was contained when created can be redirected by a later
    entry replacing a link it goes through.
    """
    for link in links:
        if os.path.islink(link) and not is_within(root, os.path.realpath(link)):
            logger.debug("removing symlink %s: resolves outside destination", link)
            try:
                os.unlink(link)
            except OSError as exc:
                logger.warning("failed to remove escaping symlink %s: %s", link, exc)


def unpack_tarball(contents: bytes, dst: str, strip_components: int = 0) -> None:
    """Unpack a zstd-compressed tarball held in memory into ``dst``.

    ``strip_components`` leading path segments are dropped from every stored
    path (e.g. 1 to drop a ``pkg-1.0/`` top-level directory). Entries whose
    path is absolute, empty after stripping, or escapes ``dst`` are skipped.
    Parent directories are created as needed on a best-effort basis.
    Directory permissions are applied once all entries have been written.

    There is no rollback: when an error is raised, entries already written
    stay on disk.

    Raises:
        DecodeError: ``contents`` is not valid zstd.
        ArchiveFormatError: the tar structure is corrupt.
        ExtractError: writing an accepted entry failed; remaining entries are
            not processed.
    """
    if strip_components < 0:
        raise ValueError("strip_components must be non-negative")
    root = os.path.realpath(dst)
    deferred_dirs: List[Tuple[str, ArchiveEntry]] = []
    written = 0
    skipped = 0
    links: List[str] = []

    entries = iter_entries(contents)
    try:
        for entry, reader in entries:
            target = sanitize(root, entry.path, strip_components)
            if target is None:
                logger.debug("skipping unsafe entry %r", entry.path)
                skipped += 1
                continue
            if entry.kind == KIND_OTHER:
                logger.debug("skipping unsupported entry type %r", entry.path)
                skipped += 1
                continue

            if target != root:
                _ensure_parent(target)
                # Symlinks extracted earlier must not redirect writes out of the root
                if not is_within(root, os.path.realpath(os.path.dirname(target))):
                    logger.debug("skipping entry %r: parent resolves outside destination", entry.path)
                    skipped += 1
                    continue

            try:
                if entry.kind == KIND_DIR:
                    if os.path.islink(target):
                        logger.debug("skipping directory %r: path is a symlink", entry.path)
                        skipped += 1
                        continue
                    os.makedirs(target, exist_ok=True)
                    deferred_dirs.append((target, entry))
                elif entry.kind == KIND_FILE and reader is not None:
                    logger.debug("extracting %s", entry.path)
                    _write_file(target, reader)
                    _safe_chmod(target, entry.mode)
                    _safe_utime(target, entry.mtime)
                elif entry.kind == KIND_SYMLINK:
                    # Lexical check first, then resolve through links already on disk
                    if (
                        not entry.linkname
                        or not symlink_target_is_contained(root, target, entry.linkname)
                        or not is_within(root, os.path.realpath(os.path.join(os.path.dirname(target), entry.linkname)))
                    ):
                        logger.debug("skipping symlink %r -> %r: target escapes destination", entry.path, entry.linkname)
                        skipped += 1
                        continue
                    if not _write_symlink(target, entry.linkname):
                        skipped += 1
                        continue
                    links.append(target)
                    _safe_utime(target, entry.mtime)
                elif entry.kind == KIND_HARDLINK:
                    source = sanitize(root, entry.linkname or "", strip_components)
                    if (
                        source is None
                        or not os.path.isfile(source)
                        or not is_within(root, os.path.realpath(source))
                    ):
                        logger.debug("skipping hardlink %r -> %r", entry.path, entry.linkname)
                        skipped += 1
                        continue
                    _write_hardlink(target, source)
            except OSError as exc:
                raise ExtractError(entry.path, str(exc)) from exc
            written += 1
    finally:
        entries.close()
        _drop_escaping_links(root, links)

    for path, entry in sorted(deferred_dirs, key=lambda item: item[0], reverse=True):
        _safe_chmod(path, entry.mode)
        _safe_utime(path, entry.mtime)

    logger.info("unpacked %d entries into %s (%d skipped)", written, root, skipped)


__all__ = [
    "ArchiveEntry",
    "iter_entries",
    "unpack_tarball",
    "KIND_FILE",
    "KIND_DIR",
    "KIND_SYMLINK",
    "KIND_HARDLINK",
    "KIND_OTHER",
]
