import json

import pytest
from typer.testing import CliRunner

from chunkproof_cli.__main__ import app
from chunkproof_core.merkle import MerkleTree

runner = CliRunner()


@pytest.fixture
def data_file(tmp_path):
    p = tmp_path / "data.bin"
    p.write_bytes(b"aaaabbbbccccdddd")
    return p


def test_root(data_file):
    r = runner.invoke(app, ["root", str(data_file), "--chunk-size", "4"])
    assert r.exit_code == 0, r.output
    expected = MerkleTree.from_chunks([b"aaaa", b"bbbb", b"cccc", b"dddd"]).root.hex()
    assert expected in r.output


def test_root_bad_chunk_count(data_file):
    r = runner.invoke(app, ["root", str(data_file), "--chunk-size", "6"])
    assert r.exit_code == 2
    assert "power of two" in r.output


def test_prove_to_stdout(data_file):
    r = runner.invoke(app, ["prove", str(data_file), "2", "--chunk-size", "4"])
    assert r.exit_code == 0, r.output
    doc = json.loads(r.output)
    assert doc["leaf_index"] == 2
    assert [s["side"] for s in doc["steps"]] == ["R", "L"]


def test_prove_then_verify(data_file, tmp_path):
    proof = tmp_path / "p.json"
    r = runner.invoke(
        app, ["prove", str(data_file), "1", "--chunk-size", "4", "--out", str(proof)]
    )
    assert r.exit_code == 0, r.output
    r = runner.invoke(app, ["verify", str(data_file), "1", str(proof), "--chunk-size", "4"])
    assert r.exit_code == 0, r.output
    r = runner.invoke(app, ["verify", str(data_file), "3", str(proof), "--chunk-size", "4"])
    assert r.exit_code == 1


def test_verify_pinned_root(data_file, tmp_path):
    proof = tmp_path / "p.json"
    runner.invoke(app, ["prove", str(data_file), "0", "--chunk-size", "4", "--out", str(proof)])
    root = json.loads(proof.read_text())["root_hex"]
    args = ["verify", str(data_file), "0", str(proof), "--chunk-size", "4", "--root"]
    assert runner.invoke(app, args + [root]).exit_code == 0
    assert runner.invoke(app, args + ["00" * 20]).exit_code == 1


def test_verify_malformed_proof(data_file, tmp_path):
    proof = tmp_path / "p.json"
    proof.write_text('{"steps": []}')
    r = runner.invoke(app, ["verify", str(data_file), "0", str(proof), "--chunk-size", "4"])
    assert r.exit_code == 2


def test_index_out_of_range(data_file):
    r = runner.invoke(app, ["prove", str(data_file), "4", "--chunk-size", "4"])
    assert r.exit_code == 2


def test_show(data_file):
    r = runner.invoke(app, ["show", str(data_file), "--chunk-size", "4"])
    assert r.exit_code == 0, r.output
    assert MerkleTree.from_chunks([b"aaaa", b"bbbb", b"cccc", b"dddd"]).root.hex() in r.output


def test_missing_file(tmp_path):
    r = runner.invoke(app, ["root", str(tmp_path / "nope.bin")])
    assert r.exit_code == 2
    assert "Cannot read" in r.output


def test_verify_missing_proof(data_file, tmp_path):
    r = runner.invoke(
        app, ["verify", str(data_file), "0", str(tmp_path / "nope.json"), "--chunk-size", "4"]
    )
    assert r.exit_code == 2
