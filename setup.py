#!/usr/bin/env python
# encoding: utf-8
from setuptools import setup
from os import path

install_requires = ['numpy']

long_description = open(path.join(path.dirname(__file__), 'README.rst')).read()

setup(
    name='kaldi-nnet3',
    packages=['kaldi_nnet3'],
    package_data={'kaldi_nnet3': ['test_data/*.txt']},
    include_package_data=True,
    version='0.1.0',
    python_requires='>=3.6',
    install_requires=install_requires,
    extras_require={'test': ['pytest']},
    entry_points={
        'console_scripts': [
            'nnet3-text-info=kaldi_nnet3.nnet3_info:main',
        ],
    },
    url='https://github.com/kaldi-asr/kaldi',
    license='Apache, Version 2.0',
    keywords='Kaldi nnet3 neural network model parser',
    description='Reader for Kaldi nnet3 models in text format',
    long_description=long_description,
    classifiers=[c.strip() for c in '''
        Programming Language :: Python :: 3
        License :: OSI Approved :: Apache Software License
        Operating System :: POSIX :: Linux
        Intended Audience :: Science/Research
        Environment :: Console
        '''.strip().splitlines()],
)
