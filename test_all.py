'''
this script checks all python scripts in src directory
it runs every script, detects pass/failure based on return code, and report that

it can also be collected by pytest, in which case any failed script fails test_all
'''

import os
import glob
import subprocess
import sys


def run_all():
    all_fpaths = glob.glob(os.path.join(os.path.dirname(os.path.abspath(__file__)), 'src/*.py'))
    all_fpaths.sort()

    failed = []
    for fpath in all_fpaths:
        completed = subprocess.run(
            [sys.executable, fpath], stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
        retcode = completed.returncode
        status = 'PASSED' if retcode == 0 else 'FAILED (%d)' % retcode
        bname = os.path.basename(fpath)
        print('%s: %s' % (bname, status))
        if retcode != 0:
            failed.append(bname)
    return failed


def test_all():
    assert run_all() == []


if __name__ == '__main__':
    exit(1 if len(run_all()) else 0)
