"""
# Riffstruct: RIFF files for humans.

A RIFF file is a tree of chunks, each one a four bytes identifier, a
little endian length and that many bytes of data; some chunks (RIFF itself,
LIST) contain other chunks.

Formats are described declaratively: a Chunk is an ordered list of Fields
and the only operation defined is

 1. unpack(): reading the binary data through a bounded Cursor and build
    a high-level representation of that.

Every read is checked against the end of the view the cursor is over, a
length declared by the file is checked before any byte it covers is
read. The first error stops the parsing.

An instance representing a chunk can be in one of the following states

 1. INIT
 2. UNPACKING
 3. DONE
 4. ERROR

"""
