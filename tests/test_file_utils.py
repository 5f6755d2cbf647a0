import os
import tempfile
import unittest

from scanmon.utils.file_utils import count_files


class TestCountFiles(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = self._tmp.name

    def tearDown(self):
        self._tmp.cleanup()

    def touch(self, *parts):
        path = os.path.join(self.root, *parts)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, 'w') as f:
            f.write('x')
        return path

    def test_empty_directory(self):
        self.assertEqual(count_files(self.root), 0)

    def test_nested_tree(self):
        self.touch('a.txt')
        self.touch('sub', 'b.txt')
        self.touch('sub', 'deeper', 'c.txt')
        self.touch('sub', 'deeper', 'd.txt')
        os.makedirs(os.path.join(self.root, 'empty'))
        self.assertEqual(count_files(self.root), 4)

    def test_symlink_to_file_counts_once(self):
        target = self.touch('real.txt')
        os.symlink(target, os.path.join(self.root, 'link.txt'))
        self.assertEqual(count_files(self.root), 2)

    def test_symlinked_directory_counts_as_one_entry(self):
        self.touch('data', 'one.txt')
        self.touch('data', 'two.txt')
        os.symlink(os.path.join(self.root, 'data'), os.path.join(self.root, 'alias'))
        self.assertEqual(count_files(self.root), 3)

    def test_self_referencing_links_do_not_loop(self):
        self.touch('only.txt')
        os.symlink(self.root, os.path.join(self.root, 'l1'))
        os.symlink(self.root, os.path.join(self.root, 'l2'))
        self.assertEqual(count_files(self.root), 3)

    def test_missing_directory_raises(self):
        with self.assertRaises(OSError):
            count_files(os.path.join(self.root, 'missing'))


if __name__ == '__main__':
    unittest.main()
