"""
Servers that announce new connections through `connection_events`, the interface the loader
binds handlers to.
"""
import logging
import socket

from hookloader.support.events import EventSource

logger = logging.getLogger(__name__)


class ConnectionServer:
    """
    Fires `connection_events` with each new connection.
    Subclasses accept connections from a transport and call connected().
    """
    def __init__(self):
        self.connection_events = EventSource()

    def connected(self, connection):
        """ Notifies the listeners of a new connection. Listener exceptions propagate to the caller. """
        self.connection_events.fire(connection)
        return connection


class ClientConnection:
    """
    The connection handed to handlers for each accepted TCP client.
    :param sock: the socket of the accepted client
    :param address: the client's address
    """
    def __init__(self, sock, address=None):
        self.sock = sock
        self.address = address

    def send(self, data: bytes):
        self.sock.sendall(data)

    def receive(self, size=4096) -> bytes:
        """ Reads up to size bytes. An empty result means the client has stopped sending. """
        return self.sock.recv(size)

    def read_all(self) -> bytes:
        """ Reads until the client shuts down its side of the connection. """
        chunks = []
        while True:
            chunk = self.receive()
            if not chunk:
                return b''.join(chunks)
            chunks.append(chunk)

    @property
    def closed(self) -> bool:
        return self.sock.fileno() < 0

    def close(self):
        if self.closed:
            return
        try:
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass    # already disconnected
        finally:
            self.sock.close()

    def __repr__(self):
        return "<ClientConnection %s>" % (self.address,)


class TCPConnectionServer(ConnectionServer):
    """
    Accepts TCP clients on the calling thread. Each client is announced as a ClientConnection.
    The connections still open are closed when the server is closed.

    :param host: the interface to listen on
    :param port: the port to listen on. 0 chooses a free port, see `address`.
    :param backlog: the number of pending connections allowed
    :param timeout: seconds accept_one() waits for a client before raising socket.timeout.
        None waits indefinitely.
    """
    def __init__(self, host='127.0.0.1', port=0, backlog=5, timeout=None):
        super().__init__()
        self.host = host
        self.port = port
        self.backlog = backlog
        self.timeout = timeout
        self.sock = None
        self.clients = []

    @property
    def address(self):
        """ the address the server is listening on, or None when not listening """
        return self.sock.getsockname() if self.sock else None

    def listen(self):
        s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            s.bind((self.host, self.port))
            s.listen(self.backlog)
        except OSError:
            s.close()
            raise
        s.settimeout(self.timeout)
        self.sock = s
        logger.info("listening on %s:%s" % self.address)
        return self

    def accept_one(self):
        """
        Waits for a client to connect and fires the connection event with it.
        :return: the ClientConnection for the client
        :raises socket.timeout: when no client connects within the timeout
        """
        if self.sock is None:
            self.listen()
        client, address = self.sock.accept()
        # reads from the client wait no longer than accepting does
        client.settimeout(self.timeout)
        connection = ClientConnection(client, address)
        self.clients.append(connection)
        logger.info("client connected: %s" % (address,))
        return self.connected(connection)

    def serve_forever(self):
        """ Accepts clients until the server is closed. """
        while self.sock is not None:
            try:
                self.accept_one()
            except socket.timeout:
                continue
            except OSError:
                if self.sock is None:
                    break
                raise

    def close(self):
        sock, self.sock = self.sock, None
        if sock is not None:
            sock.close()
        for client in self.clients:
            client.close()
        self.clients = []

    def __enter__(self):
        return self.listen() if self.sock is None else self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
