"""Tests for cleanup path calculation and per-host deletion."""

import pytest

from pangolin.core.context import ExecutionContext
from pangolin.core.errors import ConfigurationError, PathError
from pangolin.operation import CleanupOptions, DeleteHostFiles, cleanup_step, get_cleanup_files
from pangolin.operation.cleanup import sorted_cleanup_files
from pangolin.topology import parse_topology

from fakes import FakeCluster

ALL = CleanupOptions(clean_data=True, clean_log=True, clean_tls=True)


def _topology(components, monitored=None, **global_options):
    data = {
        "global": {"user": "tidb", "deploy_dir": "/deploy", **global_options},
        "components": components,
    }
    if monitored is not None:
        data["monitored"] = monitored
    return parse_topology(data)


COLOCATED = [
    {"name": "pd", "instances": [
        {"host": "h1", "port": 2379, "data_dir": "/data/pd", "log_dir": "/var/log/shared"},
    ]},
    {"name": "tikv", "instances": [
        {"host": "h1", "port": 20160, "data_dir": "/data/kv1,/data/kv2",
         "log_dir": "/var/log/shared"},
        {"host": "h2", "port": 20160, "data_dir": "/data/kv1", "log_dir": "/var/log/tikv"},
    ]},
]


class TestInstancePaths:
    """Paths contributed by component instances."""

    def test_data_and_logs(self) -> None:
        files = get_cleanup_files(_topology(COLOCATED), CleanupOptions(clean_data=True, clean_log=True))
        assert files == {
            "h1": {"/data/pd/*", "/data/kv1/*", "/data/kv2/*", "/var/log/shared/*.log"},
            "h2": {"/data/kv1/*", "/var/log/tikv/*.log"},
        }

    def test_shared_log_dir_listed_once(self) -> None:
        files = get_cleanup_files(_topology(COLOCATED), CleanupOptions(clean_log=True))
        assert sorted_cleanup_files(files) == [
            ("h1", ["/var/log/shared/*.log"]),
            ("h2", ["/var/log/tikv/*.log"]),
        ]

    def test_independent_of_component_order(self) -> None:
        forward = get_cleanup_files(_topology(COLOCATED), ALL)
        backward = get_cleanup_files(_topology(list(reversed(COLOCATED))), ALL)
        assert forward == backward
        assert forward == get_cleanup_files(_topology(COLOCATED), ALL)

    def test_nothing_requested(self) -> None:
        assert get_cleanup_files(_topology(COLOCATED), CleanupOptions()) == {}

    def test_tls_directory(self) -> None:
        files = get_cleanup_files(_topology(COLOCATED), CleanupOptions(clean_tls=True))
        assert files["h1"] == {"/deploy/pd-2379/tls", "/deploy/tikv-20160/tls"}

    def test_tls_kept_when_cluster_uses_tls(self) -> None:
        topology = _topology(COLOCATED, tls_enabled=True)
        assert get_cleanup_files(topology, CleanupOptions(clean_tls=True)) == {}


class TestRetention:
    """Retained roles and nodes contribute nothing."""

    def test_retained_role(self) -> None:
        files = get_cleanup_files(
            _topology(COLOCATED), CleanupOptions(clean_data=True, retain_roles=("tikv",))
        )
        assert files == {"h1": {"/data/pd/*"}}

    def test_retained_node_by_id(self) -> None:
        files = get_cleanup_files(
            _topology(COLOCATED), CleanupOptions(clean_data=True, retain_nodes=("h1:20160",))
        )
        assert files == {"h1": {"/data/pd/*"}, "h2": {"/data/kv1/*"}}

    def test_retained_node_by_host(self) -> None:
        files = get_cleanup_files(
            _topology(COLOCATED), CleanupOptions(clean_data=True, retain_nodes=("h1",))
        )
        assert files == {"h2": {"/data/kv1/*"}}


class TestMonitorPaths:
    """Monitoring agent paths per host."""

    MONITORED = {"deploy_dir": "monitor", "data_dir": "data", "log_dir": "/var/log/monitor"}

    def test_monitor_paths_added_per_host(self) -> None:
        files = get_cleanup_files(_topology(COLOCATED, self.MONITORED), ALL)
        for host in ("h1", "h2"):
            assert "/home/tidb/monitor/data/*" in files[host]
            assert "/var/log/monitor/*.log" in files[host]
            assert "/home/tidb/monitor/tls" in files[host]

    def test_hosts_without_agent_skipped(self) -> None:
        components = [
            {"name": "pd", "instances": [
                {"host": "h1", "port": 2379, "data_dir": "/data/pd"},
                {"host": "h2", "port": 2379, "data_dir": "/data/pd", "ignore_exporter": True},
            ]},
        ]
        files = get_cleanup_files(
            _topology(components, self.MONITORED), CleanupOptions(clean_data=True)
        )
        assert files["h1"] == {"/data/pd/*", "/home/tidb/monitor/data/*"}
        assert files["h2"] == {"/data/pd/*"}

    def test_retained_host_skipped(self) -> None:
        files = get_cleanup_files(
            _topology(COLOCATED, self.MONITORED),
            CleanupOptions(clean_data=True, retain_nodes=("h2",)),
        )
        assert "h2" not in files
        assert "/home/tidb/monitor/data/*" in files["h1"]

    def test_retained_instance_keeps_host_agent_cleanup(self) -> None:
        components = [
            {"name": "tikv", "instances": [
                {"host": "h2", "port": 20160, "data_dir": "/data/kv1"},
            ]},
        ]
        files = get_cleanup_files(
            _topology(components, self.MONITORED),
            CleanupOptions(clean_data=True, retain_nodes=("h2:20160",)),
        )
        assert files == {"h2": {"/home/tidb/monitor/data/*"}}

    def test_retained_instance_among_colocated(self) -> None:
        files = get_cleanup_files(
            _topology(COLOCATED, self.MONITORED),
            CleanupOptions(clean_data=True, retain_nodes=("h2:20160",)),
        )
        assert files["h2"] == {"/home/tidb/monitor/data/*"}

    def test_ignored_agent_instance_skipped(self) -> None:
        components = [
            {"name": "node_exporter", "instances": [
                {"host": "h1", "port": 9100, "data_dir": "/data/ne", "ignore_exporter": True},
            ]},
        ]
        files = get_cleanup_files(_topology(components), CleanupOptions(clean_data=True))
        assert files == {}

    def test_absolute_monitor_data_dir(self) -> None:
        monitored = {"deploy_dir": "/opt/monitor", "data_dir": "/srv/monitor", "log_dir": "log"}
        files = get_cleanup_files(
            _topology(COLOCATED, monitored), CleanupOptions(clean_data=True, clean_log=True)
        )
        assert "/srv/monitor/*" in files["h1"]
        assert "/home/tidb/log/*.log" in files["h1"]


class TestDeletion:
    """Per-host deletion step."""

    def test_one_rm_per_host(self, ctx: ExecutionContext) -> None:
        files = {"h1": {"/data/b/*", "/data/a/*"}, "h2": {"/data/c/*"}}
        cluster = FakeCluster(["h1", "h2"])
        step = cleanup_step(files, cluster.executors)
        assert step.name == "clean"
        step.execute(ctx)
        assert sorted(cluster.journal) == [
            ("h1", "rm -rf /data/a/* /data/b/*", True),
            ("h2", "rm -rf /data/c/*", True),
        ]

    def test_missing_executor(self) -> None:
        with pytest.raises(ConfigurationError):
            cleanup_step({"h9": {"/data/*"}}, {})

    @pytest.mark.parametrize("path", ["/", "/*", "relative/*", "//"])
    def test_unsafe_paths_refused(self, path: str, ctx: ExecutionContext) -> None:
        cluster = FakeCluster(["h1"])
        unit = DeleteHostFiles("h1", (path,), cluster.executors["h1"])
        with pytest.raises(PathError):
            unit.run(ctx)
        assert cluster.journal == []
