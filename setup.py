"""
Setup script for Bandwidth Tracker.

Usage:
    pip install -e .[test]      # development install
    python setup.py py2app      # macOS background app bundle

The py2app bundle ends up in the 'dist' folder.
"""
import sys

from setuptools import setup

APP = ['bandwidth_tracker.py']

OPTIONS = {
    'argv_emulation': False,
    'plist': {
        'CFBundleName': 'Bandwidth Tracker',
        'CFBundleDisplayName': 'Bandwidth Tracker',
        'CFBundleIdentifier': 'com.bandwidthtracker.app',
        'CFBundleVersion': '1.0.0',
        'CFBundleShortVersionString': '1.0.0',
        'LSMinimumSystemVersion': '10.14.0',
        'LSUIElement': True,  # Hide dock icon (background app)
    },
    'packages': [
        'monitor',
        'storage',
        'config',
        'app',
    ],
    'includes': [
        'psutil',
        'objc',
        'Foundation',
        'AppKit',
    ],
    'excludes': [
        'tkinter',
        'pytest',
        'pip',
    ],
    'site_packages': True,
}

bundle_kwargs = {}
if 'py2app' in sys.argv:
    bundle_kwargs = {
        'app': APP,
        'options': {'py2app': OPTIONS},
        'setup_requires': ['py2app'],
    }

setup(
    name='bandwidth-tracker',
    version='1.0.0',
    description='Background network bandwidth sampler with persistent history',
    python_requires='>=3.9',
    packages=['app', 'config', 'monitor', 'storage'],
    py_modules=['bandwidth_tracker'],
    install_requires=[
        'psutil>=5.9',
        'pyobjc-framework-Cocoa>=9.0; sys_platform == "darwin"',
    ],
    extras_require={
        'test': ['pytest>=7.0'],
    },
    entry_points={
        'console_scripts': [
            'bandwidth-tracker=bandwidth_tracker:main',
        ],
    },
    **bundle_kwargs,
)
