import unittest

from nativebuilder.matrix import ALL_VARIANTS, ConfigurationKey, Variant, expand_matrix
from nativebuilder.platforms import Architecture, Platform


class TestConfigurationKey(unittest.TestCase):

    def test_release_names(self):
        key = ConfigurationKey(Platform.LINUX, Architecture.X64, Variant.RELEASE)
        self.assertEqual(key.arch_name, "intel64")
        self.assertEqual(key.target_name(), "linux_intel64")
        self.assertEqual(key.config_id, "linux_intel64")
        self.assertEqual(key.artifact_name("tbb"), "tbb-linux_intel64")
        self.assertEqual(str(key), "linux/x64/release")

    def test_debug_names(self):
        key = ConfigurationKey(Platform.WINDOWS, Architecture.ARM64, Variant.DEBUG)
        self.assertEqual(key.target_name(), "windows_arm64_dbg")
        self.assertEqual(key.target_name(separator="-"), "windows-arm64-dbg")
        self.assertEqual(key.artifact_name("tbb"), "tbb-windows_arm64-dbg")
        self.assertEqual(key.variant.cfg, "debug")


class TestExpandMatrix(unittest.TestCase):

    def test_cross_product_in_order(self):
        targets = [(Platform.MACOS, Architecture.X64), (Platform.MACOS, Architecture.ARM64)]
        keys = expand_matrix(targets)
        self.assertEqual(len(keys), len(targets) * len(ALL_VARIANTS))
        self.assertEqual([str(k) for k in keys], [
            "macos/x64/debug",
            "macos/x64/release",
            "macos/arm64/debug",
            "macos/arm64/release",
        ])

    def test_no_duplicates(self):
        targets = [(Platform.LINUX, Architecture.X64), (Platform.LINUX, Architecture.X64)]
        keys = expand_matrix(targets, [Variant.RELEASE, Variant.RELEASE])
        self.assertEqual(keys, [ConfigurationKey(Platform.LINUX, Architecture.X64, Variant.RELEASE)])

    def test_empty(self):
        self.assertEqual(expand_matrix([]), [])


if __name__ == '__main__':
    unittest.main()
