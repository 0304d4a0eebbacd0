import pytest


ROOT = "https://maisa.test/api/worker/w1"


@pytest.mark.parametrize(
    "raw",
    [ROOT, f"{ROOT}/", f"{ROOT}/run", f"{ROOT}/run/"],
)
def test_resolve_endpoints_normalizes_run_suffix_and_slash(raw):
    from maisa_node.services.endpoints import resolve_endpoints

    endpoints = resolve_endpoints(raw)
    assert endpoints.root == ROOT
    assert endpoints.submit == f"{ROOT}/run"
    assert endpoints == resolve_endpoints(ROOT)


@pytest.mark.parametrize(
    "variant, status, listing, download",
    [
        (
            "legacy",
            f"{ROOT}/run/E1",
            f"{ROOT}/run/E1/files",
            f"{ROOT}/run/E1/files/out.pdf",
        ),
        (
            "runs",
            f"{ROOT}/runs/E1/detail",
            f"{ROOT}/runs/E1/file/listed?limit=100",
            f"{ROOT}/runs/E1/file/out.pdf",
        ),
    ],
)
def test_endpoint_templates_per_variant(variant, status, listing, download):
    from maisa_node.services.endpoints import resolve_endpoints

    endpoints = resolve_endpoints(f"{ROOT}/run", variant)
    assert endpoints.submit == f"{ROOT}/run"
    assert endpoints.status("E1") == status
    assert endpoints.list_files("E1") == listing
    assert endpoints.download("E1", "out.pdf") == download


def test_only_one_trailing_slash_is_stripped():
    from maisa_node.services.endpoints import resolve_endpoints

    endpoints = resolve_endpoints(f"{ROOT}//")
    assert endpoints.root == f"{ROOT}/"
    assert endpoints.submit == f"{ROOT}//run"


def test_url_without_scheme_is_not_validated():
    from maisa_node.services.endpoints import resolve_endpoints

    assert resolve_endpoints("maisa.test/w").submit == "maisa.test/w/run"


def test_unknown_variant_is_rejected():
    from maisa_node.services.endpoints import resolve_endpoints
    from maisa_node.services.errors import InvalidParameter

    with pytest.raises(InvalidParameter) as excinfo:
        resolve_endpoints(ROOT, "v3")
    assert "MAISA_API_VARIANT_UNSUPPORTED" in str(excinfo.value)
