# Implements the "Length-Prefixed Framing Protocol"
# Protocol Format:
# [ 4-byte Header ] [ N-byte Body ]
# - Header: A 4-byte unsigned integer ('!I') in network byte order
#             (big-endian), specifying the length of the body.
# - Body: N bytes of UTF-8 encoded JSON.
#
# The leaderboard client and server exchange exactly one request and
# one response per connection.

import json
import socket
import struct
import logging

logger = logging.getLogger(__name__)

# Header is 4 bytes, unsigned int, network byte order
HEADER_FORMAT = '!I'
HEADER_LENGTH = struct.calcsize(HEADER_FORMAT)

# Max message size is 64 KiB
MAX_MSG_SIZE = 65536


def _recv_all(sock: socket.socket, length: int) -> bytes | None:
    """Receive exactly 'length' bytes, or None if the peer closed first."""
    chunks = []
    bytes_received = 0
    while bytes_received < length:
        chunk = sock.recv(length - bytes_received)
        if not chunk:
            logger.error(f"Socket closed unexpectedly while waiting for {length} bytes. "
                         f"Received {bytes_received} bytes so far.")
            return None
        chunks.append(chunk)
        bytes_received += len(chunk)
    return b''.join(chunks)


def send_msg(sock: socket.socket, message_bytes: bytes):
    """
    Sends a message using the length-prefixed protocol.

    Raises ValueError when the body is larger than MAX_MSG_SIZE, and
    re-raises socket errors after logging them.
    """
    length = len(message_bytes)
    if length > MAX_MSG_SIZE:
        raise ValueError(f"Message size ({length} bytes) exceeds limit ({MAX_MSG_SIZE} bytes)")

    header_bytes = struct.pack(HEADER_FORMAT, length)
    try:
        # sendall() handles partial sends for us
        sock.sendall(header_bytes + message_bytes)
    except socket.error as e:
        # "Broken pipe" and friends when the other side disconnected
        logger.error(f"Socket error during send: {e}")
        raise


def recv_msg(sock: socket.socket) -> bytes | None:
    """
    Receives a message using the length-prefixed protocol.

    Returns the message body as bytes, or None if the peer disconnected
    or violated the framing.
    """
    try:
        header_bytes = _recv_all(sock, HEADER_LENGTH)
        if header_bytes is None:
            return None

        body_length = struct.unpack(HEADER_FORMAT, header_bytes)[0]
        if not (0 < body_length <= MAX_MSG_SIZE):
            logger.error(f"Invalid message length received: {body_length}. Closing connection.")
            sock.close()
            return None

        body_bytes = _recv_all(sock, body_length)
        if body_bytes is None:
            logger.warning(f"Peer disconnected after sending header for {body_length} bytes.")
            return None
        return body_bytes

    except (socket.error, struct.error) as e:
        logger.error(f"Error during recv: {e}")
        return None


def send_json(sock: socket.socket, payload: dict):
    """Encode a dict as UTF-8 JSON and send it as one frame."""
    send_msg(sock, json.dumps(payload).encode('utf-8'))


def recv_json(sock: socket.socket) -> dict | None:
    """
    Receive one frame and decode it as a JSON object.
    Returns None on disconnect; raises ValueError on a body that is not JSON.
    """
    body = recv_msg(sock)
    if body is None:
        return None
    try:
        return json.loads(body.decode('utf-8'))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValueError(f"invalid JSON frame: {e}") from e
