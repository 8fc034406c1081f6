"""
Tests for the standalone instance assembly.
"""

import pytest

from shipyard.assemblies import InstanceAssembly
from shipyard.config import InstanceConfig
from shipyard.core import Instance, Role, SecurityGroup, SubnetType
from shipyard.errors import ConfigurationMissing, GraphValidationError
from shipyard.providers import StaticNetworkLookup


@pytest.fixture
def graph(instance_config, network_lookup):
    return InstanceAssembly(instance_config, network_lookup).build()


class TestInstanceAssembly:
    """Tests for InstanceAssembly.build."""

    def test_nodes(self, graph):
        assert graph.name == "Ec2Stack"
        assert graph.list_nodes() == ["ec2-role", "sg", "instance"]

    def test_security_group_allows_ssh_and_http(self, graph):
        (sg,) = graph.nodes_of_type(SecurityGroup)

        assert sg.rule_set() == {("tcp", 22, "0.0.0.0/0"), ("tcp", 80, "0.0.0.0/0")}
        assert sg.allow_all_outbound is True

    def test_instance(self, graph, user_data):
        (instance,) = graph.nodes_of_type(Instance)
        (role,) = graph.nodes_of_type(Role)

        assert instance.instance_type == "t2.micro"
        assert instance.image.generation.value == "al2"
        assert instance.role == role
        assert role.service == "ec2.amazonaws.com"
        assert instance.subnet_type == SubnetType.PUBLIC
        assert instance.bootstrap.render() == user_data.read_text()

    def test_outputs(self, graph):
        """Test that the instance id and public address are exposed."""
        outputs = {output.name: (output.source, output.attribute) for output in graph.outputs}

        assert outputs == {
            "instanceId": ("instance", "id"),
            "instancePublicIp": ("instance", "public_ip"),
        }

    def test_replacement_flag(self, user_data, network_lookup):
        config = InstanceConfig(user_data_path=user_data, user_data_causes_replacement=False)

        graph = InstanceAssembly(config, network_lookup).build()

        assert graph.get("instance").replace_on_bootstrap_change is False

    def test_missing_bootstrap_file(self, tmp_path, network_lookup):
        """Test that a missing script fails before anything is built."""
        config = InstanceConfig(user_data_path=tmp_path / "missing.sh")

        with pytest.raises(ConfigurationMissing, match="missing.sh"):
            InstanceAssembly(config, network_lookup).build()

    def test_missing_bootstrap_checked_before_network(self, tmp_path):
        class ExplodingLookup(StaticNetworkLookup):
            def resolve(self, is_default=True, vpc_id=None):
                raise AssertionError("network should not be resolved")

        config = InstanceConfig(user_data_path=tmp_path / "missing.sh")

        with pytest.raises(ConfigurationMissing):
            InstanceAssembly(config, ExplodingLookup("vpc-1", ["a"])).build()

    def test_no_public_subnet(self, instance_config):
        lookup = StaticNetworkLookup("vpc-1", ["subnet-a"], public_subnet_ids=[])

        with pytest.raises(GraphValidationError, match="public"):
            InstanceAssembly(instance_config, lookup).build()

    def test_any_subnet(self, user_data):
        lookup = StaticNetworkLookup("vpc-1", ["subnet-a"], public_subnet_ids=[])
        config = InstanceConfig(user_data_path=user_data, subnet_type="all")

        graph = InstanceAssembly(config, lookup).build()

        assert graph.get("instance").subnet_type == SubnetType.ALL

    def test_build_is_repeatable(self, instance_config, network_lookup):
        assembly = InstanceAssembly(instance_config, network_lookup)

        assert assembly.build() == assembly.build()

    def test_default_script(self, network_lookup):
        graph = InstanceAssembly(InstanceConfig(), network_lookup).build()

        assert "nginx" in graph.get("instance").bootstrap.render()
