"""Read-only access to a file system image: inodes, block maps, directories and paths."""

from __future__ import annotations

import argparse
import struct
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

from xv6tools.layout import (
    BSIZE,
    DIRSIZ,
    IPB,
    NDIRECT,
    NINDIRECT,
    ROOTINO,
    Dinode,
    Dirent,
    InodeType,
    Superblock,
    iblock,
)

_INDIRECT = struct.Struct(f"<{NINDIRECT}I")
_LS_BUF = 512


class FsError(Exception):
    """Raised when the image is malformed or a lookup or read cannot be done."""


@dataclass(frozen=True)
class StatResult:
    """Metadata of one inode, as reported by stat."""

    type: int
    ino: int
    nlink: int
    size: int


def skipelem(path: str) -> Optional[Tuple[str, str]]:
    """Split the first element off ``path``.

    Returns ``(name, rest)`` where ``rest`` has no leading slashes, or None
    when the path holds no element. Names are cut to DIRSIZ characters.
    """
    stripped = path.lstrip("/")
    if not stripped:
        return None
    name, _, rest = stripped.partition("/")
    return name[:DIRSIZ], rest.lstrip("/")


def fmtname(path: str) -> str:
    """Last element of ``path``, padded with blanks to DIRSIZ characters."""
    name = path.rsplit("/", 1)[-1]
    if len(name) >= DIRSIZ:
        return name
    return name.ljust(DIRSIZ)


class FsImage:
    """A file system image held in memory."""

    def __init__(self, data: bytes) -> None:
        self.data = bytes(data)
        self.nblocks = len(self.data) // BSIZE
        if self.nblocks < 2:
            raise FsError("image is too small to hold a superblock")
        self.sb = Superblock.unpack(self._block(1))

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "FsImage":
        return cls(Path(path).read_bytes())

    def _block(self, bno: int) -> bytes:
        if not 0 <= bno < self.nblocks:
            raise FsError(f"block {bno} outside image of {self.nblocks} blocks")
        return self.data[bno * BSIZE:(bno + 1) * BSIZE]

    def _indirect(self, bno: int) -> Tuple[int, ...]:
        return _INDIRECT.unpack(self._block(bno))

    def inode(self, inum: int) -> Dinode:
        """Return the on-disk inode ``inum``."""
        if not 1 <= inum < self.sb.ninodes:
            raise FsError(f"inode {inum} out of range")
        block = self._block(iblock(inum, self.sb))
        off = (inum % IPB) * Dinode.SIZE
        ino = Dinode.unpack(block[off:off + Dinode.SIZE])
        if ino.type == 0:
            raise FsError(f"inode {inum} has no type")
        return ino

    def bmap(self, inode: Dinode, bn: int) -> int:
        """Disk block holding block ``bn`` of ``inode``; 0 for an unallocated block."""
        if bn < 0:
            raise FsError("bmap: negative block number")
        if bn < NDIRECT:
            return inode.addrs[bn]
        bn -= NDIRECT

        if bn < NINDIRECT:
            addr = inode.addrs[NDIRECT]
            if addr == 0:
                return 0
            return self._indirect(addr)[bn]
        bn -= NINDIRECT

        if bn < NINDIRECT * NINDIRECT:
            addr = inode.addrs[NDIRECT + 1]
            if addr == 0:
                return 0
            addr = self._indirect(addr)[bn // NINDIRECT]
            if addr == 0:
                return 0
            return self._indirect(addr)[bn % NINDIRECT]

        raise FsError("bmap: out of range")

    def _readi(self, inode: Dinode, offset: int, n: int) -> bytes:
        if n < 0 or offset < 0:
            raise FsError("negative offset or count")
        if inode.type == InodeType.T_DEV:
            raise FsError("no device driver for device inode")
        if offset > inode.size:
            raise FsError(f"offset {offset} beyond end of file ({inode.size})")
        n = min(n, inode.size - offset)
        chunks: List[bytes] = []
        end = offset + n
        while offset < end:
            bno = self.bmap(inode, offset // BSIZE)
            start = offset % BSIZE
            m = min(end - offset, BSIZE - start)
            if bno == 0:
                chunks.append(bytes(m))
            else:
                chunks.append(self._block(bno)[start:start + m])
            offset += m
        return b"".join(chunks)

    def read(self, inum: int, offset: int = 0, n: Optional[int] = None) -> bytes:
        """Read up to ``n`` bytes of inode ``inum`` from ``offset`` (all to the end by default)."""
        ino = self.inode(inum)
        if n is None:
            n = max(ino.size - offset, 0)
        return self._readi(ino, offset, n)

    def _entries(self, dir_inum: int) -> Iterator[Dirent]:
        dp = self.inode(dir_inum)
        if dp.type != InodeType.T_DIR:
            raise FsError(f"inode {dir_inum} is not a directory")
        for off in range(0, dp.size, Dirent.SIZE):
            raw = self._readi(dp, off, Dirent.SIZE)
            if len(raw) != Dirent.SIZE:
                raise FsError(f"short directory entry in inode {dir_inum}")
            yield Dirent.unpack(raw)

    def lookup(self, dir_inum: int, name: str) -> Optional[int]:
        """Inode number of ``name`` in directory ``dir_inum``, or None."""
        wanted = name[:DIRSIZ]
        for entry in self._entries(dir_inum):
            if entry.inum != 0 and entry.name == wanted:
                return entry.inum
        return None

    def _namex(self, path: str, parent: bool) -> Tuple[int, str]:
        # Paths are resolved from the root directory whether or not they start with '/'.
        inum = ROOTINO
        name = ""
        rest = path
        while True:
            elem = skipelem(rest)
            if elem is None:
                break
            name, rest = elem
            if self.inode(inum).type != InodeType.T_DIR:
                raise FsError(f"{path}: not a directory")
            if parent and rest == "":
                return inum, name
            found = self.lookup(inum, name)
            if found is None:
                raise FsError(f"{path}: no such file or directory")
            inum = found
        if parent:
            raise FsError(f"{path}: has no parent element")
        return inum, name

    def namei(self, path: str) -> int:
        """Inode number for ``path``."""
        return self._namex(path, False)[0]

    def nameiparent(self, path: str) -> Tuple[int, str]:
        """Inode number of the parent of ``path`` and the final path element."""
        return self._namex(path, True)

    def listdir(self, path: str) -> List[Dirent]:
        """Used entries of the directory at ``path``, in on-disk order."""
        return [e for e in self._entries(self.namei(path)) if e.inum != 0]

    def stat(self, path: str) -> StatResult:
        inum = self.namei(path)
        ino = self.inode(inum)
        return StatResult(type=ino.type, ino=inum, nlink=ino.nlink, size=ino.size)


def _line(path: str, st: StatResult) -> str:
    return f"{fmtname(path)} {st.type} {st.ino} {st.size}"


def ls(image: FsImage, path: str) -> Iterator[str]:
    """Yield listing lines for ``path``; raises FsError when it cannot be opened."""
    try:
        st = image.stat(path)
    except FsError as exc:
        raise FsError(f"cannot open {path}") from exc

    if st.type == InodeType.T_FILE:
        yield _line(path, st)
    elif st.type == InodeType.T_DIR:
        if len(path) + 1 + DIRSIZ + 1 > _LS_BUF:
            yield "ls: path too long"
            return
        for entry in image.listdir(path):
            child = f"{path}/{entry.name}"
            try:
                child_st = image.stat(child)
            except FsError:
                yield f"ls: cannot stat {child}"
                continue
            yield _line(child, child_st)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="ls", description="List files in a file system image.")
    parser.add_argument("image", help="image file to read")
    parser.add_argument("paths", nargs="*", default=["."], help="paths to list")
    args = parser.parse_args(argv)

    try:
        image = FsImage.from_file(args.image)
    except OSError as exc:
        print(f"{exc.filename}: {exc.strerror}", file=sys.stderr)
        return 1
    except FsError as exc:
        print(f"ls: {exc}", file=sys.stderr)
        return 1

    for path in args.paths or ["."]:
        try:
            for line in ls(image, path):
                print(line)
        except FsError as exc:
            print(f"ls: {exc}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())