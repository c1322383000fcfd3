# xv6tools

Python tools for the xv6 teaching operating system and its exercises:

- build xv6 file system images (`xv6tools.mkfs`) and read them
  (`xv6tools.fsimage`);
- the on-disk structures `Superblock`, `Dinode` and `Dirent`, each with
  `pack()` and `unpack()` (`xv6tools.layout`);
- a small command shell that runs `;`-separated commands, interactively or
  from a batch file (`xv6tools.shell`);
- a grep with the `^ . * $` pattern subset (`xv6tools.grep`);
- the user library's and the kernel console's `printf` formatting
  (`xv6tools.printf`: `format`, `cformat`, `format_int`);
- PC keyboard scan-code decoding (`xv6tools.kbd`: `KeyboardDecoder`,
  `decode`) and a line-edited console input buffer
  (`xv6tools.console.InputBuffer`);
- thread creation, argument passing, joining, locking and
  condition-variable demonstrations (`xv6tools.threads`).

No third-party libraries are needed.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Commands

Build a file system image of a given size in blocks (`-s`) with a log of a
given size in blocks (`-l`), holding the named files from the current
directory. A leading `_` is dropped from each name inside the image; `-n`
sets the number of inodes (200 by default).

```
xv6-mkfs -s 1000 -l 30 fs.img README _cat _ls
```

List paths in an image (the root directory by default). Each line shows the
name padded to 14 characters, the inode type, the inode number and the size:

```
xv6-ls fs.img
xv6-ls fs.img README
```

Start the shell. With no argument it prompts with `prompt> `; with a file
name it echoes and runs the file's lines. A line may hold several commands
separated by `;`, each run to completion in turn, and a line in which any
command contains `quit` ends the shell once all its commands have run.

```
xv6-shell
xv6-shell commands.txt
```

Print the lines that match a pattern, from files or from standard input:

```
xv6-grep '^ab*c$' notes.txt
```

Run a thread demonstration; the subcommands are `create`, `args`,
`args-sum`, `join`, `counter` and `condition`:

```
xv6-threads join --threads 4 --iterations 1000000
xv6-threads counter --threads 4 --increments 10000
xv6-threads condition --delay 0.1
```

## Library use

```python
from xv6tools.fsimage import FsImage, ls
from xv6tools.grep import match
from xv6tools.printf import format
from xv6tools.kbd import decode

image = FsImage.from_file("fs.img")
for entry in image.listdir("/"):
    print(entry.inum, entry.name)
print(image.read(image.namei("README")))
for line in ls(image, "."):
    print(line)

match("^a.c", "abcd")             # True
format("%d %x %s", -5, 255, "ok")  # '-5 FF ok'
decode([0x2A, 0x1E, 0xAA])         # 'A'
```

Images are built in one go with `xv6tools.mkfs.ImageBuilder` (or
`build_image`):

```python
from xv6tools.mkfs import ImageBuilder

builder = ImageBuilder("fs.img", fssize=1000, logsize=30)
builder.add_file("hello", b"hello\n")
builder.finish()
```

## What this package does not do

- `FsImage` only reads images. There is no way to change an existing image:
  no writing, creating, linking or removing files, and no log replay.
- `ImageBuilder` places files in the root directory only and supports files
  up to the direct and single-indirect block limit.
- The keyboard and console modules decode and edit input given to them as
  numbers and characters; they do not talk to a real keyboard or screen.
- There is no kernel, scheduler or process model: nothing here boots or runs
  xv6 programs.