# Standalone Leaderboard Server.
#
# TCP server that listens on a dedicated port.
# Uses the Length-Prefixed Framing Protocol from common.protocol.
# All requests and responses are JSON strings.
# Persists leaderboard rows to a JSON file.
# Uses threading to handle multiple concurrent clients.

import argparse
import json
import logging
import os
import socket
import sys
import threading

# Add project root to path
current_dir = os.path.dirname(os.path.abspath(__file__))
project_root = os.path.dirname(current_dir)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from common import config
from common.protocol import send_msg, recv_msg
from common.db_schema import initialize_database
from common.db_operations import DatabaseOperations
from common.message_types import (
    ACTION_QUERY, ACTION_UPSERT, COLLECTION_LEADERBOARD, DEFAULT_SORT_FIELD,
    STATUS_ERROR, STATUS_OK, validate_request,
)

logger = logging.getLogger(__name__)

# Storage handle (shared across threads, DatabaseOperations locks the file)
db_ops: DatabaseOperations | None = None


# Database Helper Functions

def setup_database(storage_dir: str = config.STORAGE_DIR) -> DatabaseOperations:
    """Initialize JSON storage and install it as the server's database."""
    global db_ops
    db_ops = initialize_database(storage_dir)
    logger.info(f"Database initialized in {storage_dir}")
    return db_ops


# Request Processing Logic

def process_request(request_data: dict) -> dict:
    """Main logic to handle a parsed JSON request."""
    try:
        is_valid, error = validate_request(request_data)
        if not is_valid:
            return {"status": STATUS_ERROR, "reason": error}

        collection = request_data['collection']
        action = request_data['action']
        data = request_data.get('data', {})

        # === Leaderboard Collection ===
        if collection == COLLECTION_LEADERBOARD:
            if action == ACTION_UPSERT:
                entry = db_ops.upsert_entry(data)
                return {"status": STATUS_OK, "entry": entry}

            elif action == ACTION_QUERY:
                sort_by = data.get('sort_by', DEFAULT_SORT_FIELD)
                entries = db_ops.list_entries(sort_by, data.get('limit'))
                return {"status": STATUS_OK, "entries": entries}

            else:
                return {"status": STATUS_ERROR, "reason": f"Unknown action '{action}' for {collection}"}

        else:
            return {"status": STATUS_ERROR, "reason": f"Unknown collection '{collection}'"}

    except KeyError as e:
        logger.warning(f"Request processing error: Missing key {e}")
        return {"status": STATUS_ERROR, "reason": f"missing_key: {e}"}
    except ValueError as e:
        logger.warning(f"Rejected request: {e}")
        return {"status": STATUS_ERROR, "reason": str(e)}
    except Exception as e:
        logger.error(f"Unexpected error in process_request: {e}", exc_info=True)
        return {"status": STATUS_ERROR, "reason": "internal_server_error"}


# Client Handling Thread

def handle_client(client_socket: socket.socket, addr: tuple):
    """
    Runs in a separate thread for each connected client.
    Handles one request/response cycle per connection.
    """
    logger.info(f"Client connected from {addr}")
    response_data = {}

    try:
        # 1. Receive a message using our protocol
        request_bytes = recv_msg(client_socket)
        if request_bytes is None:
            logger.info(f"Client {addr} disconnected before sending data.")
            return

        # 2. Decode from bytes to string and parse JSON
        try:
            request_data = json.loads(request_bytes.decode('utf-8'))
            logger.info(f"Received from {addr}: {request_data}")
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to decode/parse JSON from {addr}: {e}")
            response_data = {"status": STATUS_ERROR, "reason": "invalid_json_format"}
            return  # 'finally' block will send this response

        # 3. Process the request
        response_data = process_request(request_data)

    except socket.error as e:
        logger.warning(f"Socket error with client {addr}: {e}")
    except Exception as e:
        logger.error(f"Unhandled exception for client {addr}: {e}", exc_info=True)
        response_data = {"status": STATUS_ERROR, "reason": "internal_server_error"}

    finally:
        # 4. Send the response
        try:
            if response_data:
                send_msg(client_socket, json.dumps(response_data).encode('utf-8'))
                logger.info(f"Sent to {addr}: {response_data.get('status')}")
        except Exception as e:
            logger.error(f"Failed to send response to {addr}: {e}")

        # 5. Close the connection
        client_socket.close()


# Main Server Loop

def serve_forever(server_socket: socket.socket, stop_event: threading.Event | None = None):
    """Accept connections on a bound, listening socket until stop_event is set."""
    while stop_event is None or not stop_event.is_set():
        try:
            client_socket, addr = server_socket.accept()
        except socket.timeout:
            continue
        except OSError as e:
            if stop_event is not None and stop_event.is_set():
                break
            logger.error(f"Socket error while accepting connections: {e}")
            continue

        # Allows server to handle multiple clients at once
        client_thread = threading.Thread(target=handle_client, args=(client_socket, addr))
        client_thread.daemon = True
        client_thread.start()


def create_server_socket(host: str, port: int) -> socket.socket:
    server_socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    server_socket.bind((host, port))
    server_socket.listen()
    return server_socket


def main():
    """Starts the leaderboard server."""
    parser = argparse.ArgumentParser(description="PlayZone Leaderboard Server")
    parser.add_argument('--host', type=str, default='0.0.0.0', help='Interface to bind')
    parser.add_argument('--port', type=int, default=config.LEADERBOARD_PORT, help='Port to listen on')
    parser.add_argument('--storage', type=str, default=config.STORAGE_DIR, help='Storage directory')
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format='[LEADERBOARD_SERVER] %(asctime)s - %(message)s')

    try:
        setup_database(args.storage)
    except Exception as e:
        logger.critical(f"Failed to initialize database: {e}")
        sys.exit(1)

    try:
        server_socket = create_server_socket(args.host, args.port)
    except OSError as e:
        logger.critical(f"Failed to bind socket: {e}")
        sys.exit(1)

    logger.info(f"Leaderboard Server listening on {args.host}:{args.port}...")
    logger.info("Press Ctrl+C to stop.")
    try:
        serve_forever(server_socket)
    except KeyboardInterrupt:
        logger.info("Shutting down leaderboard server.")
    finally:
        server_socket.close()


if __name__ == "__main__":
    main()
