import io
import logging

from virtimage.libvirt.progress import ProgressReader, log_progress


def test_pass_through():
    data = bytes(range(256)) * 4
    reports = []
    reader = ProgressReader(io.BytesIO(data), len(data), lambda done, total: reports.append(done))

    chunks = []
    while True:
        chunk = reader.read(100)
        if not chunk:
            break
        chunks.append(chunk)

    assert b"".join(chunks) == data
    assert reader.transferred == len(data)
    assert reports[-1] == len(data)
    assert reports == sorted(reports)


def test_close_closes_stream():
    stream = io.BytesIO(b"abc")
    ProgressReader(stream, 3).close()
    assert stream.closed


def test_log_progress_steps(caplog):
    report = log_progress("base", step=25)
    with caplog.at_level(logging.INFO, logger="virtimage.libvirt.progress"):
        for done in range(0, 101, 5):
            report(done, 100)

    percents = [r.args[1] for r in caplog.records]
    assert percents == [25, 50, 75, 100]


def test_log_progress_unknown_total(caplog):
    report = log_progress("base")
    with caplog.at_level(logging.INFO, logger="virtimage.libvirt.progress"):
        report(10, 0)
    assert caplog.records == []
