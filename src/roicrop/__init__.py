"""roicrop: region selection and source-resolution cropping.

Draw, select, move and resize rectangular regions over a displayed image
and extract each region from the full-resolution source bitmap.
"""

__version__ = "0.1.0"
