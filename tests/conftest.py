"""Shared fixtures."""

import textwrap
from uuid import UUID

import pytest

from shaper.models.content import ContentItem
from shaper.models.selectors import IPXESelectors
from shaper.store.memory import MemoryStore


MACHINE_UUID = UUID("7f1c0d5e-6a0b-4c43-9d7e-2b9f0c5a8e11")
CONTENT_UUID = UUID("0b7ad6e2-3c1f-4f7e-8a55-9d2f6b1c4e20")


@pytest.fixture
def make_inline():
    """Factory for inline content items."""
    def _make(name, text, exposed_uuid=None, post_transformers=None):
        return ContentItem(
            name=name,
            inline=text,
            exposed=exposed_uuid is not None,
            exposed_uuid=exposed_uuid,
            post_transformers=post_transformers or [],
        )
    return _make


@pytest.fixture
def selectors():
    return IPXESelectors(uuid=MACHINE_UUID, buildarch="x86_64")


@pytest.fixture
def object_store():
    """Memory store holding a secret and a config map."""
    store = MemoryStore()
    store.add_object("", "v1", "secrets", "default", "webhook-creds", {
        "data": {
            "username": "shaper",
            "password": "s3cret",
            "client.key": "KEY",
        },
    })
    store.add_object("", "v1", "configmaps", "default", "boot", {
        "data": {
            "kernel": "vmlinuz",
            "args": ["console=ttyS0", "quiet"],
        },
    })
    return store


def write_file(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(text))


@pytest.fixture
def config_dir(tmp_path):
    write_file(tmp_path / "config.yaml", """\
        engine:
          base_url: https://boot.example.com/
          namespace: lab
        webhook:
          timeout: 5
        """)
    write_file(tmp_path / "profiles" / "coreos.yaml", """\
        coreos:
          ipxe_template: |
            #!ipxe
            kernel {{ kernel }} ignition.config.url={{ ignition }}
          additional_content:
            - name: kernel
              object_ref:
                version: v1
                resource: configmaps
                namespace: lab
                name: boot
                path_query: "{.data.kernel}"
            - name: ignition
              exposed: true
              inline: "{}"
        """)
    write_file(tmp_path / "assignments" / "nodes.yaml", f"""\
        node-1:
          profile_name: coreos
          subject_selectors:
            buildarch: [x86_64]
            uuid_list: ["{MACHINE_UUID}"]
        default:
          profile_name: coreos
          is_default: true
        """)
    write_file(tmp_path / "objects" / "configmaps.yaml", """\
        - version: v1
          resource: configmaps
          name: boot
          object:
            data:
              kernel: vmlinuz
        """)
    return tmp_path
