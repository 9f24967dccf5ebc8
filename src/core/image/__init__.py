"""
Image processing utilities - functional architecture.

This package provides focused image processing utilities as pure functions:
- converters: Decoding, PNG/JPEG encoding, base64, alpha handling
- geometry: Normalized -> pixel mapping, clamping, quadrilateral sizing
- roi: Print region extraction (direct crop and affine perspective approximation)
- colors: Quantized color palette extraction
- processors: Download format conversion (PNG, JPEG, SVG wrapper)

All utilities are re-exported from this module for convenient access.
"""

# Color utilities
from core.image.colors import (
    count_quantized_colors,
    extract_color_palette,
    quantize_channels,
    quantize_value,
    resize_cover,
    to_hex,
)

# Converter functions
from core.image.converters import (
    decode_base64_image,
    decode_image,
    encode_jpeg,
    encode_png,
    ensure_bgr,
    flatten_on_background,
    graft_alpha_mask,
    merge_alpha,
    split_alpha,
    to_base64,
)

# Geometry functions
from core.image.geometry import (
    clamp_rect,
    denormalize_box,
    denormalize_points,
    denormalize_value,
    edge_length,
    quad_extraction_rect,
    quad_output_size,
)

# Export functions
from core.image.processors import export_image, to_svg

# Region extraction functions
from core.image.roi import apply_perspective_correction, crop_rect, crop_region

__all__ = [
    # Converter functions
    "decode_image",
    "decode_base64_image",
    "encode_png",
    "encode_jpeg",
    "to_base64",
    "ensure_bgr",
    "split_alpha",
    "merge_alpha",
    "graft_alpha_mask",
    "flatten_on_background",
    # Geometry functions
    "denormalize_value",
    "denormalize_box",
    "denormalize_points",
    "clamp_rect",
    "edge_length",
    "quad_output_size",
    "quad_extraction_rect",
    # Region extraction functions
    "crop_rect",
    "crop_region",
    "apply_perspective_correction",
    # Color utilities
    "count_quantized_colors",
    "extract_color_palette",
    "quantize_channels",
    "quantize_value",
    "resize_cover",
    "to_hex",
    # Export functions
    "export_image",
    "to_svg",
]
