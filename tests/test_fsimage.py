import pytest

from xv6tools.fsimage import FsError, FsImage, fmtname, ls, main, skipelem
from xv6tools.layout import (
    BSIZE,
    DIRSIZ,
    IPB,
    MAXFILE,
    NDIRECT,
    NINDIRECT,
    ROOTINO,
    Dinode,
    InodeType,
    iblock,
)
from xv6tools.mkfs import ImageBuilder

FSSIZE = 1000
LOGSIZE = 30

SMALL = b"hello, file system\n"
BIG = bytes(i % 251 for i in range(20 * BSIZE + 7))


@pytest.fixture
def built(tmp_path):
    builder = ImageBuilder(tmp_path / "fs.img", FSSIZE, LOGSIZE)
    a = builder.add_file("a", SMALL)
    b = builder.add_file("big", BIG)
    c = builder.add_file("_cat", b"meow")
    data = builder.finish()
    return builder, FsImage(data), {"a": a, "big": b, "cat": c}


def test_superblock_matches_builder(built):
    builder, image, _ = built
    assert image.sb == builder.sb


def test_from_file(built, tmp_path):
    builder, image, _ = built
    loaded = FsImage.from_file(tmp_path / "fs.img")
    assert loaded.sb == builder.sb
    assert loaded.data == image.data


def test_root_is_directory(built):
    _, image, _ = built
    assert image.namei("/") == ROOTINO
    assert image.inode(ROOTINO).type == InodeType.T_DIR


def test_read_small_file(built):
    _, image, inums = built
    assert image.read(inums["a"]) == SMALL


def test_read_big_file_uses_indirect_block(built):
    _, image, inums = built
    assert image.read(inums["big"]) == BIG
    ino = image.inode(inums["big"])
    assert ino.addrs[NDIRECT] != 0


def test_read_partial_and_truncated(built):
    _, image, inums = built
    assert image.read(inums["big"], 1000, 50) == BIG[1000:1050]
    assert image.read(inums["a"], 6, 1000) == SMALL[6:]
    assert image.read(inums["a"], len(SMALL), 10) == b""


def test_read_offset_beyond_size(built):
    _, image, inums = built
    with pytest.raises(FsError):
        image.read(inums["a"], len(SMALL) + 1, 1)


def test_listdir_root(built):
    _, image, inums = built
    entries = image.listdir("/")
    assert [e.name for e in entries] == [".", "..", "a", "big", "cat"]
    assert entries[0].inum == ROOTINO
    assert entries[2].inum == inums["a"]


def test_lookup_and_underscore(built):
    _, image, inums = built
    assert image.lookup(ROOTINO, "cat") == inums["cat"]
    assert image.lookup(ROOTINO, "_cat") is None
    assert image.read(inums["cat"]) == b"meow"


def test_lookup_in_file_raises(built):
    _, image, inums = built
    with pytest.raises(FsError):
        image.lookup(inums["a"], "x")


def test_namei_paths(built):
    _, image, inums = built
    assert image.namei("/a") == inums["a"]
    assert image.namei("a") == inums["a"]
    assert image.namei("//./a") == inums["a"]
    assert image.namei("/../big") == inums["big"]


def test_namei_missing(built):
    _, image, _ = built
    with pytest.raises(FsError):
        image.namei("/missing")


def test_namei_through_file(built):
    _, image, _ = built
    with pytest.raises(FsError):
        image.namei("/a/b")


def test_nameiparent(built):
    _, image, _ = built
    assert image.nameiparent("/a") == (ROOTINO, "a")
    assert image.nameiparent("big") == (ROOTINO, "big")
    with pytest.raises(FsError):
        image.nameiparent("/")


def test_stat(built):
    _, image, inums = built
    st = image.stat("/big")
    assert st.type == InodeType.T_FILE
    assert st.ino == inums["big"]
    assert st.size == len(BIG)
    assert st.nlink == 1


def test_root_size_is_block_multiple(built):
    _, image, _ = built
    assert image.stat("/").size % BSIZE == 0


def test_inode_without_type(built):
    _, image, _ = built
    with pytest.raises(FsError):
        image.inode(50)


def test_inode_out_of_range(built):
    _, image, _ = built
    with pytest.raises(FsError):
        image.inode(0)
    with pytest.raises(FsError):
        image.inode(image.sb.ninodes)


def test_bmap(built):
    _, image, inums = built
    ino = image.inode(inums["a"])
    assert image.bmap(ino, 0) == ino.addrs[0]
    assert image.bmap(ino, 1) == 0
    with pytest.raises(FsError):
        image.bmap(ino, MAXFILE)


def test_double_indirect(built):
    builder, image, _ = built
    data = bytearray(image.data)
    free = builder.freeblock
    dbl, mid, leaf = free, free + 1, free + 2
    data[dbl * BSIZE:dbl * BSIZE + 4] = mid.to_bytes(4, "little")
    data[mid * BSIZE:mid * BSIZE + 4] = leaf.to_bytes(4, "little")
    payload = b"deep".ljust(BSIZE, b"x")
    data[leaf * BSIZE:(leaf + 1) * BSIZE] = payload

    inum = 40
    addrs = [0] * (NDIRECT + 2)
    addrs[NDIRECT + 1] = dbl
    first_dbl = NDIRECT + NINDIRECT
    ino = Dinode(type=InodeType.T_FILE, nlink=1, size=(first_dbl + 1) * BSIZE, addrs=addrs)
    bno = iblock(inum, builder.sb)
    off = bno * BSIZE + (inum % IPB) * Dinode.SIZE
    data[off:off + Dinode.SIZE] = ino.pack()

    patched = FsImage(bytes(data))
    loaded = patched.inode(inum)
    assert patched.bmap(loaded, first_dbl) == leaf
    assert patched.read(inum, first_dbl * BSIZE, BSIZE) == payload
    assert patched.read(inum, 0, 16) == bytes(16)


def test_skipelem_examples():
    assert skipelem("a/bb/c") == ("a", "bb/c")
    assert skipelem("///a//bb") == ("a", "bb")
    assert skipelem("a") == ("a", "")
    assert skipelem("") is None
    assert skipelem("////") is None


def test_skipelem_truncates():
    name, rest = skipelem("/" + "n" * 20 + "/x")
    assert name == "n" * DIRSIZ
    assert rest == "x"


def test_fmtname():
    assert fmtname("/x/ab") == "ab".ljust(DIRSIZ)
    assert len(fmtname("q")) == DIRSIZ
    long_name = "z" * (DIRSIZ + 3)
    assert fmtname("/dir/" + long_name) == long_name


def test_ls_file(built):
    _, image, inums = built
    assert list(ls(image, "/a")) == [f"{fmtname('a')} 2 {inums['a']} {len(SMALL)}"]


def test_ls_directory(built):
    _, image, inums = built
    lines = list(ls(image, "/"))
    assert len(lines) == 5
    assert lines[3] == f"{fmtname('big')} 2 {inums['big']} {len(BIG)}"
    assert lines[0].startswith(fmtname(".") + " 1 1 ")


def test_ls_missing(built):
    _, image, _ = built
    with pytest.raises(FsError, match="cannot open /nope"):
        list(ls(image, "/nope"))


def test_main(built, tmp_path, capsys):
    _, _, inums = built
    assert main([str(tmp_path / "fs.img"), "/cat", "/nope"]) == 0
    captured = capsys.readouterr()
    assert captured.out == f"{fmtname('cat')} 2 {inums['cat']} 4\n"
    assert "cannot open /nope" in captured.err