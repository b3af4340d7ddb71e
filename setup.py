#!/usr/bin/env python

import setuptools

setuptools.setup(
    name="lectern",
    version="0.3.0",
    description="A small web browser with a reader drawer that extracts articles and reads them aloud.",
    packages=setuptools.find_packages(include=["lectern", "lectern.*"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    install_requires=['numpy>=1.18.2',
                      'PyYAML>=5.3',
                      'qtpy>=2.0',
                      'PyQt5>=5.15',
                      'PyQtWebEngine>=5.15',
                      'sounddevice>=0.4.6',
                      'gTTS>=2.3',
                      'pydub>=0.25',
                      'termcolor>=1.1',
                      "colorama>=0.4; platform_system=='Windows'",
                      ],
    extras_require={
        'tests': ['pytest>=7'],
    },
    python_requires='>=3.10',

    entry_points={
        'console_scripts': [
            'lectern = lectern.gui.app:main',
        ],
    },


)
