#
# (c) Copyright 2022 by Coinkite Inc. This file is covered by license found in COPYING-CC.
#
#
# Publish a collection NFT and an NFT inside it, then update its metadata.
#

from nftpub import __version__

# To use this command to install and yet be able to edit the code (here). Great for dev:
#
#   pip install --editable .
#
# with test dependencies
#
#   pip install --editable '.[test]'
#
#
from setuptools import setup

# these minimum versions are tested, some earlier values would probably work too.
requirements = [
    'requests>=2.26.0',
    'cbor2>=5.4.1',
    'base58>=2.1.0',
    'click>=8.0.3',
    'cryptography>=36.0.0',
]

test_requirements = [
    'pytest',
]

with open("README.md", "r") as fh:
    long_description = fh.read()

setup(
    name='nftpub',
    version=__version__,
    packages=[ 'nftpub' ],
    python_requires='>=3.8',
    install_requires=requirements,
    extras_require={
        'test': test_requirements,
    },
    description="Publish a collection + NFT, verify membership and update metadata",
    long_description=long_description,
    long_description_content_type="text/markdown",
    entry_points='''
        [console_scripts]
        nftpub=nftpub.cli:main
    ''',
    classifiers=[
        'Operating System :: POSIX :: Linux',
        'Operating System :: Microsoft :: Windows',
        'Operating System :: MacOS :: MacOS X',
    ],
)
