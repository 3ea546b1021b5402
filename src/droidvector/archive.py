"""Store-only ZIP archives with per-entry CRC-32 and a central directory.

Layout per entry: a 30-byte local header, the UTF-8 name, the raw payload.
After the last entry come one 46-byte central record (plus name) per entry
and the 22-byte end-of-central-directory record. Sizes and offsets are
32-bit; anything larger is rejected before a single byte is produced.
"""
from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from .errors import DroidVectorError, DuplicateEntryError, SizeOverflowError

logger = logging.getLogger(__name__)

LOCAL_SIGNATURE = 0x04034B50
CENTRAL_SIGNATURE = 0x02014B50
END_SIGNATURE = 0x06054B50

LOCAL_HEADER_SIZE = 30
CENTRAL_HEADER_SIZE = 46
END_RECORD_SIZE = 22

VERSION = 20
METHOD_STORE = 0
FLAG_UTF8 = 0x0800

# 0xFFFFFFFF and 0xFFFF are ZIP64 markers, so the usable range stops below them.
MAX_UINT32 = 0xFFFFFFFF
MAX_ENTRIES = 0xFFFF
MAX_NAME_LENGTH = 0xFFFF

_LOCAL = struct.Struct("<IHHHHHIIIHH")
_CENTRAL = struct.Struct("<IHHHHHHIIIHHHHHII")
_END = struct.Struct("<IHHHHIIH")

Timestamp = Union[datetime, int, float, None]
Payload = Union[bytes, bytearray, memoryview, str]


def _make_crc_table() -> Tuple[int, ...]:
    table = []
    for n in range(256):
        c = n
        for _ in range(8):
            c = (0xEDB88320 ^ (c >> 1)) if c & 1 else (c >> 1)
        table.append(c)
    return tuple(table)


_CRC_TABLE = _make_crc_table()


def crc32(data: bytes, value: int = 0) -> int:
    """CRC-32 (reflected polynomial 0xEDB88320); ``value`` continues a running CRC."""
    c = value ^ 0xFFFFFFFF
    table = _CRC_TABLE
    for byte in data:
        c = table[(c ^ byte) & 0xFF] ^ (c >> 8)
    return c ^ 0xFFFFFFFF


def dos_datetime(ts: datetime) -> Tuple[int, int]:
    """Pack into ZIP ``(time, date)``: 5/6/5-bit H:M:S/2 and 7/4/5-bit Y-1980:M:D."""
    if ts.year < 1980:
        ts = datetime(1980, 1, 1)
    elif ts.year > 2107:
        ts = datetime(2107, 12, 31, 23, 59, 58)
    time = (ts.hour << 11) | (ts.minute << 5) | (ts.second // 2)
    date = ((ts.year - 1980) << 9) | (ts.month << 5) | ts.day
    return time, date


def normalize_entry_path(path: str) -> str:
    name = path.replace("\\", "/")
    while name.startswith("./"):
        name = name[2:]
    name = name.lstrip("/")
    while "//" in name:
        name = name.replace("//", "/")
    if not name:
        raise DroidVectorError(f"invalid archive entry path: {path!r}", code="E_ARCHIVE_PATH")
    return name


@dataclass(frozen=True)
class ArchiveEntry:
    path: str
    data: bytes
    timestamp: Optional[datetime] = None


@dataclass(frozen=True)
class ArchiveRecord:
    """An entry as written: its CRC, packed timestamp and header offset."""

    path: str
    size: int
    crc: int
    dos_time: int
    dos_date: int
    offset: int


def _as_bytes(data: Payload) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    raise TypeError(f"archive payload must be bytes or str, got {type(data).__name__}")


def _as_datetime(ts: Timestamp) -> Optional[datetime]:
    if ts is None or isinstance(ts, datetime):
        return ts
    # Epoch numbers are UTC.
    return datetime.fromtimestamp(ts, tz=timezone.utc)


def coerce_entry(item: Any) -> ArchiveEntry:
    """Accept an :class:`ArchiveEntry`, a mapping or a ``(path, data[, ts])`` tuple."""
    if isinstance(item, ArchiveEntry):
        return ArchiveEntry(item.path, _as_bytes(item.data), _as_datetime(item.timestamp))
    if isinstance(item, Mapping):
        return ArchiveEntry(
            str(item["path"]),
            _as_bytes(item["data"]),
            _as_datetime(item.get("timestamp")),
        )
    if isinstance(item, tuple) and len(item) in (2, 3):
        ts = item[2] if len(item) == 3 else None
        return ArchiveEntry(str(item[0]), _as_bytes(item[1]), _as_datetime(ts))
    raise TypeError(f"unsupported archive entry: {item!r}")


def _dedupe(entries: List[ArchiveEntry], duplicates: str) -> List[ArchiveEntry]:
    if duplicates not in ("reject", "last"):
        raise ValueError(f"duplicates must be 'reject' or 'last', got {duplicates!r}")
    positions: dict = {}
    out: List[ArchiveEntry] = []
    for entry in entries:
        if entry.path in positions:
            if duplicates == "reject":
                raise DuplicateEntryError(f"duplicate archive path: {entry.path}")
            out[positions[entry.path]] = entry
            continue
        positions[entry.path] = len(out)
        out.append(entry)
    return out


def _check_capacity(names: List[bytes], entries: List[ArchiveEntry]) -> None:
    if len(entries) >= MAX_ENTRIES:
        raise SizeOverflowError(f"too many entries for a ZIP archive: {len(entries)}")
    offset = 0
    central_size = 0
    for name, entry in zip(names, entries):
        if len(name) > MAX_NAME_LENGTH:
            raise SizeOverflowError(f"entry name too long: {entry.path[:64]}...")
        if len(entry.data) >= MAX_UINT32:
            raise SizeOverflowError(f"entry exceeds 4 GiB: {entry.path}")
        if offset >= MAX_UINT32:
            raise SizeOverflowError(f"entry offset exceeds 32 bits: {entry.path}")
        offset += LOCAL_HEADER_SIZE + len(name) + len(entry.data)
        central_size += CENTRAL_HEADER_SIZE + len(name)
    if offset >= MAX_UINT32 or central_size >= MAX_UINT32:
        raise SizeOverflowError("archive exceeds 4 GiB")
    if offset + central_size + END_RECORD_SIZE >= MAX_UINT32:
        raise SizeOverflowError("archive exceeds 4 GiB")


class ArchiveBuilder:
    """Collects entries, then serializes them in insertion order.

    ``duplicates`` is ``"reject"`` (raise :class:`DuplicateEntryError`) or
    ``"last"`` (the last payload wins, at the first occurrence's position).
    Entries without a timestamp get the build-time wall clock, read once per
    build.
    """

    def __init__(self, *, duplicates: str = "reject") -> None:
        self.duplicates = duplicates
        self._entries: List[ArchiveEntry] = []
        self.records: List[ArchiveRecord] = []

    def add(self, path: str, data: Payload, timestamp: Timestamp = None) -> None:
        self._entries.append(ArchiveEntry(path, _as_bytes(data), _as_datetime(timestamp)))

    def extend(self, items: Iterable[Any]) -> None:
        for item in items:
            self._entries.append(coerce_entry(item))

    def __len__(self) -> int:
        return len(self._entries)

    def build(self, *, now: Optional[datetime] = None) -> bytes:
        entries = [
            ArchiveEntry(normalize_entry_path(entry.path), entry.data, entry.timestamp)
            for entry in self._entries
        ]
        entries = _dedupe(entries, self.duplicates)
        names = [entry.path.encode("utf-8") for entry in entries]
        _check_capacity(names, entries)

        build_time = now or datetime.now()
        local_parts: List[bytes] = []
        central_parts: List[bytes] = []
        records: List[ArchiveRecord] = []
        offset = 0
        for name, entry in zip(names, entries):
            crc = crc32(entry.data)
            size = len(entry.data)
            dos_time, dos_date = dos_datetime(entry.timestamp or build_time)
            flags = 0 if name.isascii() else FLAG_UTF8
            local_parts.append(
                _LOCAL.pack(
                    LOCAL_SIGNATURE,
                    VERSION,
                    flags,
                    METHOD_STORE,
                    dos_time,
                    dos_date,
                    crc,
                    size,
                    size,
                    len(name),
                    0,
                )
            )
            local_parts.append(name)
            local_parts.append(entry.data)
            central_parts.append(
                _CENTRAL.pack(
                    CENTRAL_SIGNATURE,
                    VERSION,  # made by
                    VERSION,  # needed to extract
                    flags,
                    METHOD_STORE,
                    dos_time,
                    dos_date,
                    crc,
                    size,
                    size,
                    len(name),
                    0,  # extra length
                    0,  # comment length
                    0,  # disk number start
                    0,  # internal attributes
                    0,  # external attributes
                    offset,
                )
            )
            central_parts.append(name)
            records.append(ArchiveRecord(entry.path, size, crc, dos_time, dos_date, offset))
            offset += LOCAL_HEADER_SIZE + len(name) + size

        central = b"".join(central_parts)
        end = _END.pack(END_SIGNATURE, 0, 0, len(entries), len(entries), len(central), offset, 0)
        self.records = records
        logger.debug("built archive with %d entries, %d bytes", len(entries), offset + len(central) + len(end))
        return b"".join(local_parts) + central + end


def build_archive(
    entries: Iterable[Any],
    *,
    duplicates: str = "reject",
    now: Optional[datetime] = None,
) -> bytes:
    """Serialize ``entries`` into one ZIP archive.

    Identical entries with fixed timestamps always give identical bytes.
    """
    builder = ArchiveBuilder(duplicates=duplicates)
    builder.extend(entries)
    return builder.build(now=now)


__all__ = [
    "ArchiveEntry",
    "ArchiveRecord",
    "ArchiveBuilder",
    "build_archive",
    "coerce_entry",
    "crc32",
    "dos_datetime",
    "normalize_entry_path",
    "LOCAL_HEADER_SIZE",
    "CENTRAL_HEADER_SIZE",
    "END_RECORD_SIZE",
]
