"""Point-to-point link to the paired peer.

:class:`LinkSession` owns the NONE/LISTEN/CONNECTING/CONNECTED state machine
and decides whether a record may be sent. The byte transport underneath is
pluggable: :class:`TcpTransport` listens and connects over TCP, while
:class:`SSHTransport` pipes records into a receiver command through paramiko.
"""

from .events import LinkState
from .session import LinkSession
from .ssh_transport import SSHTransport
from .tcp_transport import TcpTransport
from .transport import Transport

__all__ = ["LinkState", "LinkSession", "SSHTransport", "TcpTransport", "Transport"]
