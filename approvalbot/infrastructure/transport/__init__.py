from .base import ImageSource, ImageSourceKind, MessagingTransport
from .http_gateway import HttpGatewayTransport
