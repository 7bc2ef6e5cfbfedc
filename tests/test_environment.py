import unittest

from packaging.version import Version

from nativebuilder.catalog import (
    Candidate,
    LinuxSdkLayout,
    MacSdkLayout,
    Origin,
    WindowsSdkLayout,
    make_placeholder,
)
from nativebuilder.environment import _SDK_ENVIRONMENTS, build_environment, min_os_flags, native_path
from nativebuilder.errors import UnsupportedConfigurationError
from nativebuilder.matrix import ConfigurationKey, Variant
from nativebuilder.platforms import Architecture, Platform, family_for


def candidate_with(layout, architecture=Architecture.X64):
    return Candidate(
        name="sdk",
        toolset_version=Version("1.0"),
        architecture=architecture,
        origin=Origin.LOCAL,
        layout=layout,
    )


class TestEnvironmentTable(unittest.TestCase):

    def test_every_platform_has_an_environment_builder(self):
        for platform in Platform:
            self.assertIn(platform, _SDK_ENVIRONMENTS)
            key = ConfigurationKey(platform, family_for(platform).host_architectures[0], Variant.RELEASE)
            env = build_environment(make_placeholder(platform, key.architecture), key)
            self.assertTrue(env.flag_arguments()[0].startswith("CXXFLAGS="))


class TestWindowsEnvironment(unittest.TestCase):

    def test_paths_and_flags(self):
        layout = WindowsSdkLayout(
            bin_paths=("/vs/bin",),
            include_paths=("/vs/include", "/sdk/include"),
            library_paths=("/vs/lib",),
        )
        key = ConfigurationKey(Platform.WINDOWS, Architecture.X64, Variant.RELEASE)
        env = build_environment(candidate_with(layout), key, host_path=("/host/bin",))

        self.assertEqual(env.environment["PATH"], ";".join([native_path("/vs/bin"), "/host/bin"]))
        self.assertEqual(env.environment["INCLUDE"], ";".join([native_path("/vs/include"), native_path("/sdk/include")]))
        self.assertEqual(env.environment["LIB"], native_path("/vs/lib"))
        self.assertEqual(len(env.inputs), 4)
        self.assertEqual(env.compile_flags, ("/D_ITERATOR_DEBUG_LEVEL=0",))
        self.assertEqual(env.link_flags, ())
        self.assertEqual(env.flag_arguments(), ["CXXFLAGS=/D_ITERATOR_DEBUG_LEVEL=0"])


class TestMacEnvironment(unittest.TestCase):

    def test_min_os_per_architecture(self):
        family = family_for(Platform.MACOS)
        self.assertEqual(min_os_flags(family, Architecture.X64), ["-mmacosx-version-min=10.14"])
        self.assertEqual(min_os_flags(family, Architecture.ARM64), ["-mmacosx-version-min=11.0"])
        self.assertEqual(min_os_flags(family_for(Platform.WINDOWS), Architecture.X64), [])

    def test_sdkroot_and_flags(self):
        layout = MacSdkLayout(bin_path="/xcode/bin", sysroot="/xcode/MacOSX11.1.sdk")
        key = ConfigurationKey(Platform.MACOS, Architecture.ARM64, Variant.DEBUG)
        env = build_environment(candidate_with(layout, Architecture.ARM64), key, host_path=("/usr/bin",))

        self.assertEqual(env.environment["SDKROOT"], native_path("/xcode/MacOSX11.1.sdk"))
        self.assertEqual(env.environment["PATH"], ":".join([native_path("/xcode/bin"), "/usr/bin"]))
        self.assertEqual(env.compile_flags, ("-mmacosx-version-min=11.0",))
        self.assertEqual(env.min_os_flags, ("-mmacosx-version-min=11.0",))
        self.assertEqual(env.inputs, (native_path("/xcode/bin"), native_path("/xcode/MacOSX11.1.sdk")))


class TestLinuxEnvironment(unittest.TestCase):

    def setUp(self):
        self.layout = LinuxSdkLayout(sysroot="/opt/sysroot", gcc_toolchain="/opt/gcc", tools_path="/opt/clang/bin")
        self.key = ConfigurationKey(Platform.LINUX, Architecture.X64, Variant.RELEASE)

    def test_sysroot_flags_and_link_flags(self):
        env = build_environment(candidate_with(self.layout), self.key)
        sysroot = native_path("/opt/sysroot")
        gcc = native_path("/opt/gcc")
        self.assertEqual(env.compile_flags, (
            f'--sysroot="{sysroot}"',
            f'--gcc-toolchain="{gcc}"',
            "-target x86_64-glibc2.17-linux-gnu",
            "-D_GLIBCXX_USE_CXX11_ABI=0",
        ))
        self.assertEqual(env.link_flags, env.compile_flags + ("-fuse-ld=lld", "-static-libstdc++"))
        arguments = env.flag_arguments()
        self.assertEqual(len(arguments), 2)
        self.assertTrue(arguments[0].startswith("CXXFLAGS=--sysroot="))
        self.assertTrue(arguments[1].endswith("-fuse-ld=lld -static-libstdc++"))
        self.assertEqual(env.environment["PATH"], native_path("/opt/clang/bin"))

    def test_placeholder_has_no_inputs(self):
        env = build_environment(make_placeholder(Platform.LINUX, Architecture.X64), self.key)
        self.assertEqual(env.inputs, ())

    def test_layout_must_match_platform(self):
        with self.assertRaises(UnsupportedConfigurationError):
            build_environment(candidate_with(MacSdkLayout()), self.key)


if __name__ == '__main__':
    unittest.main()
