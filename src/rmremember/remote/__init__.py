"""Remote access to the tablet over SSH/SFTP and the USB web interface.

:class:`Tablet` is the entry point: it serializes access per transport with
:class:`TransportSlot`, opens short-lived sessions through
:class:`TabletSessions` and :class:`UsbClient`, and turns low-level network
failures into :class:`~rmremember.errors.TransportError`.
"""

from .ssh_client import Host, TabletSessions
from .tablet import Tablet
from .transport_slot import TransportSlot
from .usb_client import UsbClient

__all__ = ["Host", "TabletSessions", "Tablet", "TransportSlot", "UsbClient"]
