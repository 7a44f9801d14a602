"""
appinfo.vdf Binary Format
=========================

Layout (all integers little-endian):
    magic:u32 version:u32              <- Header (magic must be 0x07564427)
    app_id:u32 body_len:u32 body       <- Section, repeated
    ...
    00 00 00 00                        <- End of sections

Section body:
    info_state:u32                     <- State flags
    last_updated:u32                   <- Unix timestamp
    pics_token:u64                     <- Opaque access token
    sha1:byte[20]                      <- Digest of the text form (passed through)
    binary_sha1:byte[20]               <- Digest of the binary form (passed through)
    change_number:u32
    <node list>

Node list:
    0x00 name\\0 <node list>            <- Container
    0x01 name\\0 value\\0                <- String value
    0x02 name\\0 value:u32              <- Integer value
    0x08                               <- End of list (once per list, every depth)

Design Decisions:
    - body_len is always recomputed from the serialized body, never trusted
    - Digests are opaque: edits do not refresh them
    - Strings are raw bytes, no text encoding is assumed
    - A section is keyed by app_id, which is not required to be unique
"""

import struct

# Magic number - first four bytes of every appinfo.vdf
MAGIC = 0x07564427

# Sentinel that ends the section list where an app_id would be
SECTIONS_END = b"\x00\x00\x00\x00"

# Node tags
NODE_CONTAINER = 0x00
NODE_STRING = 0x01
NODE_INT = 0x02
NODE_END = 0x08

NODE_KINDS = {
    NODE_CONTAINER: "container",
    NODE_STRING: "string",
    NODE_INT: "int",
}

# Wire layouts
U32 = struct.Struct("<I")
HEADER = struct.Struct("<II")          # magic, version
SECTION_FRAME = struct.Struct("<II")   # app_id, body_len

DIGEST_SIZE = 20

# info_state, last_updated, pics_token, sha1, binary_sha1, change_number
SECTION_FIXED = struct.Struct("<IIQ20s20sI")

U32_MAX = 0xFFFFFFFF
U64_MAX = 0xFFFFFFFFFFFFFFFF

# Max bytes read for fast identification
MAX_MAGIC_SCAN_BYTES = 4

