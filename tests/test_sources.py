"""Tests for discovery sources."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import httpx
import pytest
from azure.core.exceptions import AzureError
from botocore.exceptions import ClientError
from tencentcloud.common.exception.tencent_cloud_sdk_exception import TencentCloudSDKException

from clustermeta.config import DiscoverySettings, InventorySettings, Settings
from clustermeta.exceptions import SourceConfigurationError, SourceUnavailableError
from clustermeta.models import CredentialResolverKind, CredResolverConfig
from clustermeta.sources import (
    AksSource,
    EksSource,
    InventorySource,
    KubeconfigSource,
    TkeSource,
    build_sources,
)
from clustermeta.sources.tencent import _profile_credential

KUBECONFIG = """
apiVersion: v1
kind: Config
current-context: dev
clusters:
- name: shared
  cluster:
    server: https://k8s.example.com
users:
- name: admin
  user:
    token: abc
contexts:
- name: dev
  context:
    cluster: shared
    user: admin
- name: prod
  context:
    cluster: shared
    user: admin
"""


def resolver(vendor: str, account_id: str = "123", **kwargs) -> CredResolverConfig:
    return CredResolverConfig(account_id=account_id, infra_vendor=vendor, **kwargs)


class TestKubeconfigSource:
    async def test_lists_context_names(self, tmp_path):
        path = tmp_path / "config"
        path.write_text(KUBECONFIG)
        source = KubeconfigSource(path)

        clusters = await source.list_clusters()

        assert [c.cluster_name for c in clusters] == ["dev", "prod"]
        assert all(c.cred_resolver_id == "" for c in clusters)
        assert source.authoritative
        assert source.description == f"Kubeconfig:{path}"

    async def test_missing_file(self, tmp_path):
        assert await KubeconfigSource(tmp_path / "nope").list_clusters() == []

    async def test_empty_file(self, tmp_path):
        path = tmp_path / "config"
        path.write_text("")
        assert await KubeconfigSource(path).list_clusters() == []

    async def test_invalid_file(self, tmp_path):
        path = tmp_path / "config"
        path.write_text("apiVersion: v1\nkind: Config\ncontexts: []\n")

        with pytest.raises(SourceUnavailableError):
            await KubeconfigSource(path).list_clusters()


class TestInventorySource:
    async def test_lists_items(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/v1/clusters"
            return httpx.Response(
                200,
                json={
                    "items": [
                        {"clusterName": "a", "credResolverId": "123", "clusterTags": {"env": "prod"}},
                        {"clusterName": "b"},
                        {"credResolverId": "no-name"},
                    ]
                },
            )

        source = InventorySource("http://inventory:8080/", transport=httpx.MockTransport(handler))

        clusters = await source.list_clusters()

        assert source.description == "Inventory:http://inventory:8080"
        assert [c.cluster_name for c in clusters] == ["a", "b"]
        assert clusters[0].cluster_tags == {"env": "prod"}

    async def test_plain_list_payload(self):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, json=[{"clusterName": "a"}])
        )
        clusters = await InventorySource("http://inventory", transport=transport).list_clusters()
        assert [c.cluster_name for c in clusters] == ["a"]

    async def test_any_success_status(self):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(203, json={"items": [{"clusterName": "a"}]})
        )
        clusters = await InventorySource("http://inventory", transport=transport).list_clusters()
        assert [c.cluster_name for c in clusters] == ["a"]

    @pytest.mark.parametrize("status_code", [302, 404, 500])
    async def test_non_success_status(self, status_code):
        transport = httpx.MockTransport(lambda request: httpx.Response(status_code))
        with pytest.raises(SourceUnavailableError):
            await InventorySource("http://inventory", transport=transport).list_clusters()


class TestEksSource:
    @pytest.fixture
    def session(self):
        session = MagicMock()
        session.region_name = "us-east-1"
        eks = session.client.return_value
        eks.get_paginator.return_value.paginate.return_value = [
            {"clusters": ["alpha"]},
            {"clusters": ["beta"]},
        ]
        eks.describe_cluster.side_effect = lambda name: {
            "cluster": {"name": name, "tags": {"team": name}}
        }
        return session

    async def test_lists_clusters(self, session):
        source = EksSource(resolver("AWS", account_alias="prod"), session_factory=lambda c: session)

        clusters = await source.list_clusters()

        assert source.description == "AWS:123 (prod)"
        assert [c.cluster_name for c in clusters] == ["alpha", "beta"]
        assert clusters[0].cred_resolver_id == "123"
        assert clusters[0].cluster_tags == {"team": "alpha", "region": "us-east-1"}
        session.client.assert_called_with("eks", region_name="us-east-1")

    async def test_regions_attribute(self, session):
        source = EksSource(
            resolver("AWS", resolver_attributes={"regions": "eu-west-1, ap-northeast-2"}),
            session_factory=lambda c: session,
        )

        clusters = await source.list_clusters()

        assert [c.cluster_tags["region"] for c in clusters] == [
            "eu-west-1",
            "eu-west-1",
            "ap-northeast-2",
            "ap-northeast-2",
        ]

    async def test_no_region(self, session):
        session.region_name = None
        source = EksSource(resolver("AWS"), session_factory=lambda c: session)

        with pytest.raises(SourceUnavailableError):
            await source.list_clusters()

    async def test_client_error(self, session):
        session.client.return_value.get_paginator.return_value.paginate.side_effect = ClientError(
            {"Error": {"Code": "AccessDeniedException", "Message": "denied"}}, "ListClusters"
        )
        source = EksSource(resolver("AWS"), session_factory=lambda c: session)

        with pytest.raises(SourceUnavailableError):
            await source.list_clusters()

    def test_profile_kind_requires_profile(self):
        with pytest.raises(SourceConfigurationError):
            EksSource(resolver("AWS", kind=CredentialResolverKind.PROFILE))


class TestAksSource:
    @pytest.fixture
    def client(self):
        client = MagicMock()
        client.managed_clusters.list.return_value = [
            SimpleNamespace(
                name="aks-1",
                tags={"env": "dev"},
                location="koreacentral",
                id="/subscriptions/sub/resourceGroups/rg-dev/providers/"
                "Microsoft.ContainerService/managedClusters/aks-1",
            ),
            SimpleNamespace(name="aks-2", tags=None, location=None, id=None),
        ]
        return client

    async def test_lists_clusters(self, client):
        source = AksSource(resolver("AZURE", account_id="sub"), client_factory=lambda c: client)

        clusters = await source.list_clusters()

        assert source.description == "Azure:sub"
        assert clusters[0].cluster_tags == {
            "env": "dev",
            "location": "koreacentral",
            "resourceGroup": "rg-dev",
        }
        assert clusters[1].cluster_tags == {}
        assert all(c.cred_resolver_id == "sub" for c in clusters)
        client.close.assert_called_once()

    async def test_azure_error(self, client):
        client.managed_clusters.list.side_effect = AzureError("forbidden")
        source = AksSource(resolver("AZURE"), client_factory=lambda c: client)

        with pytest.raises(SourceUnavailableError):
            await source.list_clusters()
        client.close.assert_called_once()

    def test_profile_kind_rejected(self):
        with pytest.raises(SourceConfigurationError):
            AksSource(resolver("AZURE", kind=CredentialResolverKind.PROFILE))


def tke_cluster(name: str, cluster_id: str, tags: dict[str, str] | None = None):
    tag_specification = [
        SimpleNamespace(
            ResourceType="cluster",
            Tags=[SimpleNamespace(Key=k, Value=v) for k, v in (tags or {}).items()],
        )
    ]
    return SimpleNamespace(ClusterName=name, ClusterId=cluster_id, TagSpecification=tag_specification)


class TestTkeSource:
    @pytest.fixture
    def client(self):
        client = MagicMock()
        client.DescribeClusters.side_effect = [
            SimpleNamespace(
                TotalCount=3,
                Clusters=[
                    tke_cluster("tke-1", "cls-1", {"env": "prod"}),
                    tke_cluster("tke-2", "cls-2"),
                ],
            ),
            SimpleNamespace(TotalCount=3, Clusters=[tke_cluster("tke-3", "cls-3")]),
        ]
        return client

    async def test_lists_clusters(self, client):
        calls = []

        def factory(cred_resolver, region):
            calls.append((cred_resolver.id, region))
            return client

        source = TkeSource(
            resolver(
                "TENCENT",
                account_alias="games",
                resolver_attributes={"regions": "ap-seoul"},
            ),
            client_factory=factory,
        )

        clusters = await source.list_clusters()

        assert source.description == "Tencent:123 (games)"
        assert calls == [("123", "ap-seoul")]
        assert [c.cluster_name for c in clusters] == ["tke-1", "tke-2", "tke-3"]
        assert clusters[0].cluster_tags == {
            "env": "prod",
            "region": "ap-seoul",
            "clusterId": "cls-1",
        }
        assert all(c.cred_resolver_id == "123" for c in clusters)
        offsets = [call.args[0].Offset for call in client.DescribeClusters.call_args_list]
        assert offsets == [0, 2]

    async def test_one_client_per_region(self):
        client = MagicMock()
        client.DescribeClusters.return_value = SimpleNamespace(TotalCount=0, Clusters=[])
        regions = []

        def factory(cred_resolver, region):
            regions.append(region)
            return client

        source = TkeSource(
            resolver("TENCENT", resolver_attributes={"regions": "ap-seoul,ap-tokyo"}),
            client_factory=factory,
        )

        assert await source.list_clusters() == []
        assert regions == ["ap-seoul", "ap-tokyo"]

    async def test_no_region(self, client):
        source = TkeSource(resolver("TENCENT"), client_factory=lambda c, r: client)

        with pytest.raises(SourceUnavailableError):
            await source.list_clusters()

    async def test_sdk_error(self, client):
        client.DescribeClusters.side_effect = TencentCloudSDKException(
            "AuthFailure.SecretIdNotFound", "secret id not found"
        )
        source = TkeSource(
            resolver("TENCENT", resolver_attributes={"regions": "ap-seoul"}),
            client_factory=lambda c, r: client,
        )

        with pytest.raises(SourceUnavailableError):
            await source.list_clusters()

    def test_profile_kind_requires_profile(self):
        with pytest.raises(SourceConfigurationError):
            TkeSource(resolver("TENCENT", kind=CredentialResolverKind.PROFILE))

    def test_profile_credential_file(self, tmp_path):
        (tmp_path / "ops.credential").write_text('{"secretId": "AKID", "secretKey": "KEY"}')

        cred = _profile_credential("ops", directory=tmp_path)

        assert (cred.secret_id, cred.secret_key) == ("AKID", "KEY")

    def test_missing_profile_credential_file(self, tmp_path):
        with pytest.raises(TencentCloudSDKException):
            _profile_credential("ops", directory=tmp_path)


class TestBuildSources:
    def test_order_and_skips(self, tmp_path):
        settings = Settings(
            inventory=InventorySettings(enabled=True, address="http://inventory"),
            discovery=DiscoverySettings(kubeconfig_paths=[tmp_path / "config"]),
        )
        cred_resolvers = [
            resolver("AWS", account_id="1"),
            resolver("TENCENT", account_id="2"),
            resolver("AWS", account_id="3", kind=CredentialResolverKind.PROFILE),
            resolver("AZURE", account_id="4", kind=CredentialResolverKind.IMDS),
            resolver("TENCENT", account_id="5", kind=CredentialResolverKind.PROFILE),
        ]

        sources = build_sources(settings, cred_resolvers)

        assert [type(s) for s in sources] == [
            InventorySource,
            KubeconfigSource,
            EksSource,
            TkeSource,
            AksSource,
        ]
        assert [s.description for s in sources[2:]] == ["AWS:1", "Tencent:2", "Azure:4"]

    def test_inventory_disabled(self):
        settings = Settings(
            inventory=InventorySettings(enabled=False, address="http://inventory"),
            discovery=DiscoverySettings(kubeconfig_paths=[]),
        )
        assert build_sources(settings, []) == []

    def test_inventory_without_address(self):
        settings = Settings(
            inventory=InventorySettings(enabled=True, address=""),
            discovery=DiscoverySettings(kubeconfig_paths=[]),
        )
        assert build_sources(settings, []) == []
