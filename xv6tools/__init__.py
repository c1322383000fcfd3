"""Tools for xv6 file system images, a small command shell, grep, printf formatting, keyboard and console input decoding, and thread demonstrations."""

__version__ = "0.1.0"

__all__ = ["layout", "mkfs", "fsimage", "shell", "grep", "printf", "kbd", "console", "threads"]