"""fivem-utility: FiveM server utilities and the container packaging pipeline that ships them."""

__version__ = "0.1.0"
