from typing import TypeAlias

FilePathStr: TypeAlias = str
ByteOffset: TypeAlias = int
ByteRange: TypeAlias = tuple[ByteOffset, ByteOffset]
