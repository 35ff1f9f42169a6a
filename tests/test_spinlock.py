import threading

from tulipstack.spinlock import SpinLock


def test_lock_and_unlock():
    lock = SpinLock()
    assert lock.locked is False
    lock.lock()
    assert lock.locked is True
    lock.unlock()
    assert lock.locked is False


def test_unlock_when_clear_is_harmless():
    lock = SpinLock()
    lock.unlock()
    assert lock.locked is False


def test_context_manager():
    lock = SpinLock()
    with lock as held:
        assert held is lock
        assert lock.locked is True
    assert lock.locked is False


def test_mutual_exclusion():
    lock = SpinLock()
    counter = {"value": 0}
    observed = []
    threads_count = 4
    iterations = 500

    def work():
        for _ in range(iterations):
            with lock:
                observed.append(lock.locked)
                current = counter["value"]
                counter["value"] = current + 1

    threads = [threading.Thread(target=work) for _ in range(threads_count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert counter["value"] == threads_count * iterations
    assert len(observed) == threads_count * iterations
    assert all(observed)
    assert lock.locked is False