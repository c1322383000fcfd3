"""On-disk file system format: block geometry, superblock, inodes and directory entries."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import ClassVar, List

ROOTINO = 1
BSIZE = 512

NDIRECT = 11
NINDIRECT = BSIZE // 4
MAXFILE = NDIRECT + NINDIRECT + NINDIRECT * NINDIRECT

DIRSIZ = 14

# Bitmap bits per block.
BPB = BSIZE * 8

# Open flags.
O_RDONLY = 0x000
O_WRONLY = 0x001
O_RDWR = 0x002
O_CREATE = 0x200


class InodeType(IntEnum):
    """Kinds of file an inode can describe."""

    T_DIR = 1
    T_FILE = 2
    T_DEV = 3


def _check_length(data: bytes, size: int, what: str) -> None:
    if len(data) < size:
        raise ValueError(f"{what} needs {size} bytes, got {len(data)}")


@dataclass
class Superblock:
    """Describes the layout of a file system image."""

    size: int = 0
    nblocks: int = 0
    ninodes: int = 0
    nlog: int = 0
    logstart: int = 0
    inodestart: int = 0
    bmapstart: int = 0

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<7I")
    SIZE: ClassVar[int] = _STRUCT.size

    def pack(self) -> bytes:
        return self._STRUCT.pack(
            self.size,
            self.nblocks,
            self.ninodes,
            self.nlog,
            self.logstart,
            self.inodestart,
            self.bmapstart,
        )

    @classmethod
    def unpack(cls, data: bytes) -> "Superblock":
        _check_length(data, cls.SIZE, "superblock")
        return cls(*cls._STRUCT.unpack_from(data, 0))


@dataclass
class Dinode:
    """On-disk inode."""

    type: int = 0
    major: int = 0
    minor: int = 0
    nlink: int = 0
    size: int = 0
    addrs: List[int] = field(default_factory=lambda: [0] * (NDIRECT + 2))

    _STRUCT: ClassVar[struct.Struct] = struct.Struct(f"<4hI{NDIRECT + 2}I")
    SIZE: ClassVar[int] = _STRUCT.size

    def pack(self) -> bytes:
        if len(self.addrs) != NDIRECT + 2:
            raise ValueError(f"an inode holds exactly {NDIRECT + 2} addresses")
        return self._STRUCT.pack(
            self.type, self.major, self.minor, self.nlink, self.size, *self.addrs
        )

    @classmethod
    def unpack(cls, data: bytes) -> "Dinode":
        _check_length(data, cls.SIZE, "inode")
        type_, major, minor, nlink, size, *addrs = cls._STRUCT.unpack_from(data, 0)
        return cls(type_, major, minor, nlink, size, list(addrs))


@dataclass
class Dirent:
    """Directory entry: an inode number and a name of at most DIRSIZ bytes."""

    inum: int = 0
    name: str = ""

    _STRUCT: ClassVar[struct.Struct] = struct.Struct(f"<H{DIRSIZ}s")
    SIZE: ClassVar[int] = _STRUCT.size

    def pack(self) -> bytes:
        raw = self.name.encode("utf-8", "surrogateescape")[:DIRSIZ]
        return self._STRUCT.pack(self.inum, raw)

    @classmethod
    def unpack(cls, data: bytes) -> "Dirent":
        _check_length(data, cls.SIZE, "directory entry")
        inum, raw = cls._STRUCT.unpack_from(data, 0)
        name = raw.split(b"\0", 1)[0].decode("utf-8", "surrogateescape")
        return cls(inum, name)


# Inodes per block.
IPB = BSIZE // Dinode.SIZE


def iblock(inum: int, sb: Superblock) -> int:
    """Block holding inode ``inum``."""
    return inum // IPB + sb.inodestart


def bblock(b: int, sb: Superblock) -> int:
    """Free-map block holding the bit for block ``b``."""
    return b // BPB + sb.bmapstart