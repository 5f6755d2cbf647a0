"""Stand-in for clamscan. Usage: fake_clamscan.py MODE -r --verbose PATH"""

import sys
import time


def main():
    mode = sys.argv[1]
    target = sys.argv[-1]

    if mode == 'infected':
        for i in range(5):
            print(f"Scanning {target}/file{i}")
        print(f"{target}/file3: Eicar-Signature FOUND")
        print("----------- SCAN SUMMARY -----------")
        print("Scanned files: 5")
        print("Infected files: 1")
        return 0

    if mode == 'overcount':
        for i in range(5):
            print(f"Scanning {target}/file{i}")
        print("Infected files: 0")
        return 0

    if mode == 'empty':
        print("----------- SCAN SUMMARY -----------")
        print("Scanned files: 0")
        print("Infected files: 0")
        return 0

    if mode == 'nosummary':
        print(f"Scanning {target}/only")
        return 0

    if mode == 'echo':
        print(f"Scanning {target}")
        print(f"ARGC {len(sys.argv)}")
        print("Infected files: 0")
        return 0

    if mode == 'stderr':
        print(f"Scanning {target}/a")
        print("LibClamAV Warning: database is older than 7 days", file=sys.stderr)
        print("Infected files: 0")
        return 0

    if mode == 'unicode':
        data = f"Scanning {target}/файл-🦠\nInfected files: 0\n".encode('utf-8')
        for i in range(len(data)):
            sys.stdout.buffer.write(data[i:i + 1])
            sys.stdout.buffer.flush()
        return 0

    if mode == 'fail':
        print(f"Scanning {target}/a")
        print(f"ERROR: Can't access {target}", file=sys.stderr)
        return 2

    if mode == 'hang':
        print(f"Scanning {target}/a", flush=True)
        while True:
            time.sleep(1)

    return 3


if __name__ == '__main__':
    sys.exit(main())
