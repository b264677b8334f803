# ==============================================================================
# THRIFT POS
# ==============================================================================
# Point of sale and inventory tracking for a secondhand clothing shop.
#
#   from thrift_pos.main import create_app
# ==============================================================================

__version__ = "1.0.0"
