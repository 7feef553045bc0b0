#!/usr/bin/env python3
"""
hlsladder Test Runner

Usage:
    python test.py           # Run all tests
    python test.py quick     # Run quick tests (skip slow)
    python test.py verbose   # Run with verbose output
    python test.py failed    # Re-run only failed tests
    python test.py module    # Test specific module (e.g., python test.py ladder)
"""

import sys
import subprocess
import os

def main():
    project_dir = os.path.dirname(os.path.abspath(__file__))
    os.chdir(project_dir)
    
    cmd = [sys.executable, "-m", "pytest", "tests/"]
    
    args = sys.argv[1:] if len(sys.argv) > 1 else []
    
    if not args:
        cmd.extend(["-v", "--tb=short"])
        print("[TEST] Running all tests...\n")
        
    elif "quick" in args:
        cmd.extend(["-v", "--tb=short", "-m", "not slow"])
        print("[QUICK] Running quick tests (skipping slow)...\n")
        
    elif "verbose" in args:
        cmd.extend(["-v", "-s", "--tb=long"])
        print("[VERBOSE] Running tests with verbose output...\n")
        
    elif "failed" in args:
        cmd.extend(["--lf", "-v"])
        print("[RETRY] Re-running failed tests...\n")
        
    else:
        module = args[0]
        cmd = [sys.executable, "-m", "pytest", f"tests/test_{module}.py", "-v", "--tb=short"]
        print(f"[MODULE] Running tests for: {module}\n")
    
    result = subprocess.run(cmd)
    return result.returncode

if __name__ == "__main__":
    sys.exit(main())
