"""
This package contains the BTHome v2 wire codec.

Sub-packages handle each layer of the format:

- ``values``: Per-object value packing, scaling and special encodings.
- ``stream``: Payload decoding (device-info byte, address detection, object stream).
- ``frames``: Payload building (device-info byte, object stream, encryption).
"""
