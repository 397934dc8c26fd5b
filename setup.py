from setuptools import setup, find_namespace_packages

setup(
    name='atmfjstc-zip-local-reader',
    version='1.0.0',

    author_email='atmfjstc@protonmail.com',

    package_dir={'': 'src'},
    packages=find_namespace_packages(where='src', include=['atmfjstc.*']),

    install_requires=[
        'termcolor>=1, <3',
        'colorama>=0.4.6, <2',
    ],

    extras_require={
        'test': ['pytest'],
    },

    entry_points={
        'console_scripts': [
            'zip-local-reader=atmfjstc.lib.zip_local_reader.cli:main',
        ],
    },

    zip_safe=True,

    description="Minimal reader for ZIP archives that walks the local file headers, ignoring the central directory",

    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Environment :: Console",
        "Topic :: System :: Archiving",
        "Typing :: Typed",
    ],
    python_requires='>=3.7',
)
