"""Setup script for SignageBot, the unattended digital-signage kiosk shell."""

import os
from pathlib import Path

from setuptools import find_packages, setup
from setuptools.command.develop import develop
from setuptools.command.install import install


def post_install_setup():
    """Create the configuration and log directories and show next steps."""
    try:
        config_dir = Path.home() / ".config" / "signagebot"
        data_dir = Path.home() / ".local" / "share" / "signagebot"
        log_dir = data_dir / "logs"

        for directory in [config_dir, data_dir, log_dir]:
            directory.mkdir(parents=True, exist_ok=True)
            if hasattr(os, "chmod"):
                os.chmod(directory, 0o755)

        config_file = config_dir / "config.yaml"
        if not config_file.exists():
            print("\n" + "=" * 60)
            print("SignageBot Installation Complete!")
            print("=" * 60)
            print(f"Configuration directory: {config_dir}")
            print(f"Log directory: {log_dir}")
            print("\nNext Steps:")
            print("1. Put your signage content (index.html and assets) in place")
            print("2. Optionally copy config/config.yaml.example to the configuration directory")
            print("3. Run 'signagebot --content /path/to/index.html'")
            print("=" * 60)

    except Exception as e:
        print(f"Warning: Post-install setup failed: {e}")
        print("You may need to create configuration directories manually.")


class PostInstallCommand(install):
    """Custom install command with post-install setup."""

    def run(self):
        install.run(self)
        post_install_setup()


class PostDevelopCommand(develop):
    """Custom develop command with post-install setup."""

    def run(self):
        develop.run(self)
        post_install_setup()


readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

# Runtime and test requirements share one file; test tools go to the dev extra
requirements_file = Path(__file__).parent / "requirements.txt"
requirements = []
dev_requirements = []

if requirements_file.exists():
    for line in requirements_file.read_text().strip().split("\n"):
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "pytest" in line:
            dev_requirements.append(line)
        else:
            requirements.append(line)

setup(
    name="signagebot",
    version="1.0.0",
    description="Unattended digital-signage kiosk shell with a locked-down web surface",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="SignageBot Team",
    author_email="support@signagebot.local",
    packages=find_packages(exclude=["tests*", "docs*"]),
    include_package_data=True,
    install_requires=requirements,
    extras_require={
        "dev": dev_requirements,
        "test": dev_requirements,
    },
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: X11 Applications :: Qt",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX :: Linux",
        "Operating System :: MacOS",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Multimedia :: Graphics :: Presentation",
        "Topic :: System :: Hardware",
    ],
    keywords="digital-signage kiosk raspberry-pi qt webengine fullscreen",
    entry_points={
        "console_scripts": [
            "signagebot=signagebot.__main__:main",
        ],
    },
    package_data={
        "signagebot": [
            "kiosk/static/*.js",
        ],
    },
    zip_safe=False,
    platforms=["linux", "macos"],
)
