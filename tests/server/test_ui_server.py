import json
import socket
import threading
import unittest
import urllib.error
import urllib.request

from websockets.sync.client import connect

from server import ClientMessage, UIServer, UIServerConfig


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


class UIServerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.received: list[ClientMessage] = []
        self.got_message = threading.Event()
        self.server = UIServer(
            UIServerConfig(enabled=True, port=_free_port()),
            on_message=self._on_message,
        )
        self.server.start()
        self.addCleanup(self.server.stop)
        self.base = f"127.0.0.1:{self.server.port}"

    def _on_message(self, message: ClientMessage) -> None:
        self.received.append(message)
        self.got_message.set()

    def test_new_client_gets_hello_then_sticky_events(self) -> None:
        self.server.publish("timer", remaining_seconds=1500)
        self.server.publish("output", kind="system", text="not replayed")
        self.server.publish_state("idle", message="Ready")

        with connect(f"ws://{self.base}/ws", open_timeout=5) as websocket:
            types = [json.loads(websocket.recv(timeout=5))["type"] for _ in range(3)]

        self.assertEqual(["hello", "timer", "state_update"], types)

    def test_client_commands_reach_handler(self) -> None:
        with connect(f"ws://{self.base}/ws", open_timeout=5) as websocket:
            websocket.recv(timeout=5)
            websocket.send("garbage")
            websocket.send(json.dumps({"type": "command", "text": "/play"}))
            self.assertTrue(self.got_message.wait(5))

        self.assertEqual([ClientMessage(type="command", text="/play")], self.received)

    def test_healthz_and_unknown_paths(self) -> None:
        with urllib.request.urlopen(f"http://{self.base}/healthz", timeout=5) as response:
            self.assertEqual(200, response.status)
            self.assertEqual(b"ok\n", response.read())

        with self.assertRaises(urllib.error.HTTPError) as caught:
            urllib.request.urlopen(f"http://{self.base}/index.html", timeout=5)
        self.assertEqual(404, caught.exception.code)
        caught.exception.close()


if __name__ == "__main__":
    unittest.main()
