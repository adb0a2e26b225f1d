from .encoded_image import EncodedImage
from .output_format import OutputFormat, select_format
from .proxy_params import ProxyParams

__all__ = [
    "EncodedImage",
    "OutputFormat",
    "ProxyParams",
    "select_format",
]
