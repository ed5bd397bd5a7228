import os

import pytest

import cachewarden

ORIGIN = "https://app.example.com"


@pytest.fixture(params=["asyncio", "trio"])
def anyio_backend(request):
    return request.param


@pytest.fixture()
def config() -> cachewarden.Config:
    return cachewarden.Config(origin=ORIGIN, static_manifest=("/", "/index.html", "/manifest.json", "/logo.png"))


@pytest.fixture()
def use_temp_dir(tmpdir):
    cur_dir = os.getcwd()
    os.chdir(tmpdir)
    yield
    os.chdir(cur_dir)
