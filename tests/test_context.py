import threading
import time
import unittest
from unittest.mock import MagicMock

from nativebuilder.context import PlanningContext
from nativebuilder.platforms import Platform


class TestExecuteOnce(unittest.TestCase):

    def setUp(self):
        self.context = PlanningContext(host_platform=Platform.LINUX, host_path=())

    def test_runs_once_per_key(self):
        func = MagicMock(return_value="sdk")
        self.assertEqual(self.context.execute_once("key", func), "sdk")
        self.assertEqual(self.context.execute_once("key", func), "sdk")
        func.assert_called_once()

    def test_none_result_is_cached(self):
        func = MagicMock(return_value=None)
        self.assertIsNone(self.context.execute_once(("linux", "x64"), func))
        self.assertIsNone(self.context.execute_once(("linux", "x64"), func))
        func.assert_called_once()

    def test_distinct_keys_run_separately(self):
        func = MagicMock(side_effect=["first", "second"])
        self.assertEqual(self.context.execute_once("a", func), "first")
        self.assertEqual(self.context.execute_once("b", func), "second")
        self.assertEqual(func.call_count, 2)

    def test_contexts_do_not_share_results(self):
        other = PlanningContext(host_platform=Platform.LINUX, host_path=())
        func = MagicMock(return_value=1)
        self.context.execute_once("key", func)
        other.execute_once("key", func)
        self.assertEqual(func.call_count, 2)

    def test_concurrent_callers_see_one_execution(self):
        calls = []

        def slow():
            calls.append(1)
            time.sleep(0.05)
            return "value"

        results = []
        threads = [
            threading.Thread(target=lambda: results.append(self.context.execute_once("key", slow)))
            for _ in range(8)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(len(calls), 1)
        self.assertEqual(results, ["value"] * 8)

    def test_host_path_defaults_to_environment(self):
        context = PlanningContext(host_platform=Platform.LINUX)
        self.assertIsInstance(context.host_path, tuple)


if __name__ == '__main__':
    unittest.main()
