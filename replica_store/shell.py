from __future__ import annotations

import cmd
import shlex
from typing import List, Optional

from .errors import StoreError
from .runtime import ReplicaStoreRuntime


class ReplicaStoreShell(cmd.Cmd):
    intro = "Distributed file store simulator. Type 'help' for commands."
    prompt = "dfs> "

    def __init__(self, runtime: Optional[ReplicaStoreRuntime] = None, stdin=None, stdout=None):
        super().__init__(stdin=stdin, stdout=stdout)
        self.runtime = runtime or ReplicaStoreRuntime.bootstrap()
        self.gateway = self.runtime.gateway

    # Helpers ------------------------------------------------------------
    def _print(self, message: str) -> None:
        self.stdout.write(message + "\n")

    def _parse(self, arg: str) -> List[str]:
        try:
            return shlex.split(arg)
        except ValueError as exc:
            self._print(f"Parse error: {exc}")
            return []

    def _unquote(self, text: str) -> str:
        if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'":
            tokens = self._parse(text)
            if len(tokens) == 1:
                return tokens[0]
        return text

    def _parse_node_id(self, arg: str, usage: str) -> Optional[int]:
        token = arg.strip()
        if not token:
            self._print(usage)
            return None
        try:
            return int(token)
        except ValueError:
            self._print("Invalid input.")
            return None

    def _node_range(self) -> str:
        return f"0 to {self.runtime.node_registry.node_count - 1}"

    # File commands ------------------------------------------------------
    def do_create(self, arg: str) -> None:
        """create NAME [DATA] -- store a file with replication; DATA is the rest of the line"""

        parts = arg.strip().split(None, 1)
        if not parts:
            self._print("Usage: create NAME [DATA]")
            return
        name = parts[0]
        data = self._unquote(parts[1]) if len(parts) > 1 else ""
        try:
            result = self.gateway.create_file(name, data)
        except StoreError as exc:
            self._print(str(exc))
            return
        if result.degraded:
            self._print(
                f"File stored, but only {result.replica_count} replicas created "
                f"(needed {result.replication_factor})."
            )
        else:
            self._print(f"File stored with {result.replica_count} replicas.")

    def do_read(self, arg: str) -> None:
        """read NAME -- read a file from the first live replica"""

        tokens = self._parse(arg)
        if len(tokens) != 1:
            self._print("Usage: read NAME")
            return
        try:
            result = self.gateway.read_file(tokens[0])
        except StoreError as exc:
            self._print(str(exc))
            return
        self._print(f"File '{result.name}' read from node {result.node_id}.")
        self._print(f"Data: {result.payload.decode('utf-8', errors='replace')}")

    def do_files(self, arg: str) -> None:  # pylint: disable=unused-argument
        """files -- list all files and their replica locations"""

        self._print("=== Files & Replicas ===")
        for listing in self.gateway.list_files():
            self._print(f"File: {listing.name}")
            self._print(f"  Data: {listing.payload.decode('utf-8', errors='replace')}")
            replicas = " ".join(
                f"[node {loc.node_id} {'UP' if loc.node_healthy else 'DOWN'}]" for loc in listing.replicas
            )
            self._print(f"  Replicas: {replicas}")
        self._print("========================")

    # Node commands ------------------------------------------------------
    def do_nodes(self, arg: str) -> None:  # pylint: disable=unused-argument
        """nodes -- show status of all nodes"""

        self._print("=== Node Status ===")
        for row in self.gateway.list_nodes():
            self._print(f"Node {row.node_id} : {'UP' if row.healthy else 'DOWN'}")
        self._print("===================")

    def do_fail(self, arg: str) -> None:
        """fail NODE_ID -- simulate a node failure and heal replication"""

        node_id = self._parse_node_id(arg, f"Usage: fail NODE_ID ({self._node_range()})")
        if node_id is None:
            return
        try:
            transition = self.gateway.fail_node(node_id)
        except StoreError as exc:
            self._print(str(exc))
            return
        self._print(f"Node {node_id} marked as DOWN.")
        self._print_healing(transition.healing_events)

    def do_recover(self, arg: str) -> None:
        """recover NODE_ID -- bring a failed node back UP and heal replication"""

        node_id = self._parse_node_id(arg, f"Usage: recover NODE_ID ({self._node_range()})")
        if node_id is None:
            return
        try:
            transition = self.gateway.recover_node(node_id)
        except StoreError as exc:
            self._print(str(exc))
            return
        self._print(f"Node {node_id} is now UP.")
        self._print_healing(transition.healing_events)

    def _print_healing(self, events) -> None:
        for event in events:
            self._print(
                f"[HEAL] File '{event.file_name}' replicated to node {event.node_id} to maintain fault tolerance."
            )

    def do_events(self, arg: str) -> None:
        """events [count] -- show recent activity"""

        try:
            count = int(arg.strip() or 10)
        except ValueError:
            self._print("Usage: events [count]")
            return
        events = self.gateway.recent_activity(count)
        if not events:
            self._print("No events yet")
            return
        for event in events:
            self._print(f"{event.topic} {event.payload}")

    # Exit ---------------------------------------------------------------
    def do_exit(self, arg: str) -> bool:  # pylint: disable=unused-argument
        """exit -- leave the shell"""

        self._print("Exiting.")
        return True

    do_quit = do_exit
    do_EOF = do_exit


def launch_shell(runtime: Optional[ReplicaStoreRuntime] = None) -> None:
    ReplicaStoreShell(runtime).cmdloop()
