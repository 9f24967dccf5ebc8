"""
Core modules for print extraction: pure geometry and raster operations.
"""
