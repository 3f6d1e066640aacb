from os import path

from setuptools import setup, find_packages


def read_README_file():
    this_directory = path.abspath(path.dirname(__file__))
    with open(path.join(this_directory, 'README.md'), encoding='utf-8') as f:
        return f.read()


def get_install_requirements():
    return [
        'numpy>=1.17.4',
        'scipy>=1.6.0',  # HiGHS linear programming solvers
        'scikit-learn>=0.22.1',
        'pyyaml>=5.1',
    ]


setup(
    # METADATA
    name='convexvol',  # package name id -> used when 'pip install ...'
    version='1.0.dev0',  # project version

    # DESCRIPTION
    description='Volume estimation and random sampling of high-dimensional convex bodies',
    long_description=read_README_file(),
    long_description_content_type='text/markdown',

    # CONTACT and URLS
    maintainer='Luciano Di Palma',
    maintainer_email='luciano.di-palma@polytechnique.edu',

    # REQUIREMENTS
    python_requires=">=3.7, <4",  # python required version
    install_requires=get_install_requirements(),  # minimum required packages - these packages will be installed when running 'pip install'

    # easily run our test suite using pytest
    extras_require={
        'test': ['pytest'],
    },

    # TAGGING OUR PROJECT
    keywords='convex-geometry volume-estimation mcmc random-walks sampling',
    classifiers=[  # tags used to index our project
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Science/Research',
        'License :: OSI Approved :: Mozilla Public License 2.0 (MPL 2.0)',

        # Specify the Python versions you support here
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.7',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',

        # Topics
        'Topic :: Scientific/Engineering',
        'Topic :: Scientific/Engineering :: Mathematics',
    ],

    # LINKING MODULES
    zip_safe=False,
    packages=find_packages(include=['convexvol', 'convexvol.*']),
    package_data={'convexvol': ['resources/*.yaml']},
)
