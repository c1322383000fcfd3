"""Build a file system image holding a root directory and a set of files."""

from __future__ import annotations

import argparse
import struct
import sys
from pathlib import Path
from typing import Iterable, List, Optional, Union

from xv6tools.layout import (
    BPB,
    BSIZE,
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

NINODES = 200

_INDIRECT = struct.Struct(f"<{NINDIRECT}I")


class MkfsError(Exception):
    """Raised when an image cannot be built."""


class ImageBuilder:
    """Lays out an image in memory and writes it to ``path`` on finish.

    Disk layout: boot block, superblock, log, inode blocks, free bit map, data blocks.
    """

    def __init__(
        self,
        path: Union[str, Path],
        fssize: int,
        logsize: int,
        ninodes: int = NINODES,
    ) -> None:
        self.path = Path(path)
        self.fssize = fssize
        self.ninodes = ninodes
        self.nlog = logsize
        self.nbitmap = fssize // BPB + 1
        self.ninodeblocks = ninodes // IPB + 1
        self.nmeta = 2 + self.nlog + self.ninodeblocks + self.nbitmap
        self.nblocks = fssize - self.nmeta
        if self.nblocks <= 0:
            raise MkfsError(
                f"image of {fssize} blocks has no room for data after {self.nmeta} meta blocks"
            )

        self.sb = Superblock(
            size=fssize,
            nblocks=self.nblocks,
            ninodes=ninodes,
            nlog=self.nlog,
            logstart=2,
            inodestart=2 + self.nlog,
            bmapstart=2 + self.nlog + self.ninodeblocks,
        )
        self.freeinode = 1
        self.freeblock = self.nmeta
        self._image = bytearray(fssize * BSIZE)

        self._wsect(1, self.sb.pack().ljust(BSIZE, b"\0"))

        self.rootino = self.ialloc(InodeType.T_DIR)
        if self.rootino != ROOTINO:
            raise MkfsError(f"root inode is {self.rootino}, expected {ROOTINO}")
        self.iappend(self.rootino, Dirent(self.rootino, ".").pack())
        self.iappend(self.rootino, Dirent(self.rootino, "..").pack())

    def _wsect(self, sec: int, data: bytes) -> None:
        if not 0 <= sec < self.fssize:
            raise MkfsError(f"sector {sec} outside image of {self.fssize} blocks")
        if len(data) != BSIZE:
            raise MkfsError(f"sector data must be {BSIZE} bytes")
        self._image[sec * BSIZE:(sec + 1) * BSIZE] = data

    def _rsect(self, sec: int) -> bytes:
        if not 0 <= sec < self.fssize:
            raise MkfsError(f"sector {sec} outside image of {self.fssize} blocks")
        return bytes(self._image[sec * BSIZE:(sec + 1) * BSIZE])

    def _inode_offset(self, inum: int) -> tuple:
        return iblock(inum, self.sb), (inum % IPB) * Dinode.SIZE

    def _winode(self, inum: int, inode: Dinode) -> None:
        bn, off = self._inode_offset(inum)
        block = bytearray(self._rsect(bn))
        block[off:off + Dinode.SIZE] = inode.pack()
        self._wsect(bn, bytes(block))

    def _rinode(self, inum: int) -> Dinode:
        bn, off = self._inode_offset(inum)
        return Dinode.unpack(self._rsect(bn)[off:off + Dinode.SIZE])

    def _alloc_block(self) -> int:
        if self.freeblock >= self.fssize:
            raise MkfsError("out of blocks")
        block = self.freeblock
        self.freeblock += 1
        return block

    def ialloc(self, type: int) -> int:
        """Allocate the next inode with the given type and return its number."""
        inum = self.freeinode
        if inum >= self.ninodes:
            raise MkfsError("out of inodes")
        self.freeinode += 1
        self._winode(inum, Dinode(type=int(type), nlink=1, size=0))
        return inum

    def iappend(self, inum: int, data: bytes) -> None:
        """Append ``data`` to the end of inode ``inum``."""
        data = bytes(data)
        inode = self._rinode(inum)
        off = inode.size
        pos = 0
        while pos < len(data):
            fbn = off // BSIZE
            if fbn < NDIRECT:
                if inode.addrs[fbn] == 0:
                    inode.addrs[fbn] = self._alloc_block()
                block_no = inode.addrs[fbn]
            elif fbn < NDIRECT + NINDIRECT:
                if inode.addrs[NDIRECT] == 0:
                    inode.addrs[NDIRECT] = self._alloc_block()
                indirect = list(_INDIRECT.unpack(self._rsect(inode.addrs[NDIRECT])))
                if indirect[fbn - NDIRECT] == 0:
                    indirect[fbn - NDIRECT] = self._alloc_block()
                    self._wsect(inode.addrs[NDIRECT], _INDIRECT.pack(*indirect))
                block_no = indirect[fbn - NDIRECT]
            else:
                raise MkfsError(f"inode {inum} is too large")

            n1 = min(len(data) - pos, (fbn + 1) * BSIZE - off)
            block = bytearray(self._rsect(block_no))
            start = off - fbn * BSIZE
            block[start:start + n1] = data[pos:pos + n1]
            self._wsect(block_no, bytes(block))
            pos += n1
            off += n1
        inode.size = off
        self._winode(inum, inode)

    def add_file(self, name: str, data: bytes) -> int:
        """Add a regular file to the root directory; a leading '_' is dropped from the name."""
        if "/" in name:
            raise MkfsError(f"file name {name!r} must not contain '/'")
        if name.startswith("_"):
            name = name[1:]
        inum = self.ialloc(InodeType.T_FILE)
        self.iappend(self.rootino, Dirent(inum, name).pack())
        self.iappend(inum, data)
        return inum

    def finish(self) -> bytes:
        """Round up the root directory, write the free map, save the image and return it."""
        root = self._rinode(self.rootino)
        root.size = (root.size // BSIZE + 1) * BSIZE
        self._winode(self.rootino, root)

        used = self.freeblock
        if used >= BPB:
            raise MkfsError(f"{used} used blocks do not fit in one bitmap block")
        bitmap = bytearray(BSIZE)
        for i in range(used):
            bitmap[i // 8] |= 1 << (i % 8)
        self._wsect(self.sb.bmapstart, bytes(bitmap))

        image = bytes(self._image)
        self.path.write_bytes(image)
        return image


def build_image(
    image_path: Union[str, Path],
    files: Iterable[Union[str, Path]],
    fssize: int,
    logsize: int,
) -> bytes:
    """Build an image at ``image_path`` holding ``files`` under their base names."""
    builder = ImageBuilder(image_path, fssize, logsize)
    for file in files:
        path = Path(file)
        builder.add_file(path.name, path.read_bytes())
    return builder.finish()


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="mkfs", description="Build a file system image.")
    parser.add_argument("image", help="image file to create")
    parser.add_argument("files", nargs="*", help="files to place in the root directory")
    parser.add_argument("-s", "--size", type=int, required=True, help="image size in blocks")
    parser.add_argument("-l", "--log-size", type=int, required=True, help="log size in blocks")
    parser.add_argument("-n", "--inodes", type=int, default=NINODES, help="number of inodes")
    args = parser.parse_args(argv)

    try:
        builder = ImageBuilder(args.image, args.size, args.log_size, args.inodes)
        print(
            f"nmeta {builder.nmeta} (boot, super, log blocks {builder.nlog} "
            f"inode blocks {builder.ninodeblocks}, bitmap blocks {builder.nbitmap}) "
            f"blocks {builder.nblocks} total {builder.fssize}"
        )
        for file in args.files:
            if "/" in file:
                raise MkfsError(f"file name {file!r} must not contain '/'")
            builder.add_file(file, Path(file).read_bytes())
        used = builder.freeblock
        builder.finish()
    except OSError as exc:
        print(f"{exc.filename}: {exc.strerror}", file=sys.stderr)
        return 1
    except MkfsError as exc:
        print(f"mkfs: {exc}", file=sys.stderr)
        return 1

    print(f"balloc: first {used} blocks have been allocated")
    print(f"balloc: write bitmap block at sector {builder.sb.bmapstart}")
    return 0


if __name__ == "__main__":
    sys.exit(main())