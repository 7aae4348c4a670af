import sys
from pathlib import Path

from setuptools import setup, find_packages

if sys.version_info[0:2] < (3, 10):
    raise RuntimeError("This package requires Python 3.10+.")

setup(
    name="helm-pid",
    version="0.3.0",
    packages=find_packages(include=["helm", "helm.*"]),
    package_data={"helm": ["_cfg.yaml"]},
    license="MPL-2.0",
    description="An incremental PID controller with a derivative filter and automatic reset",
    long_description=Path(__file__).with_name("README.rst").read_text(encoding="utf-8"),
    long_description_content_type="text/x-rst",
    install_requires=[
        "anyio>=4.0",
        "asyncclick>=8.1",
        "moat-util",
        # moat-lib-codec>=0.4.8 imports moat.util.pp, which moat-util 0.57.0 lacks
        "moat-lib-codec<0.4.8",
        "numpy>=1.22",
        "ruyaml>=0.91",
        "trio>=0.22",
    ],
    extras_require={"test": ["pytest>=7"]},
    entry_points={"console_scripts": ["helm = helm._main:main"]},
    python_requires=">=3.10",
    classifiers=[
        "Intended Audience :: Developers",
        "Intended Audience :: Science/Research",
        "Programming Language :: Python :: 3",
        "Framework :: AnyIO",
        "Framework :: Trio",
        "Topic :: Scientific/Engineering",
        "License :: OSI Approved :: Mozilla Public License 2.0 (MPL 2.0)",
    ],
)
