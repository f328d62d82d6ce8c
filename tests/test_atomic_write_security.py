import unittest
from unittest.mock import MagicMock, patch, mock_open
from pathlib import Path

import pytest

from dotenv_writer.utils.files import atomic_write


class TestAtomicWriteSecurity(unittest.TestCase):
    def setUp(self):
        self.tmp_path = Path("/tmp/test_dir")
        self.target = self.tmp_path / ".env"
        self.fixed_uuid_hex = "00000000000000000000000000000000"
        self.expected_tmp_path = self.tmp_path / f".env.{self.fixed_uuid_hex}.tmp"

    def _fixed_uuid(self, mock_uuid):
        mock_uuid_obj = MagicMock()
        mock_uuid_obj.hex = self.fixed_uuid_hex
        mock_uuid.return_value = mock_uuid_obj

    @patch("dotenv_writer.utils.files.uuid.uuid4")
    @patch("builtins.open", new_callable=mock_open)
    @patch("dotenv_writer.utils.files.os.chmod")
    @patch("dotenv_writer.utils.files.os.replace")
    @patch("dotenv_writer.utils.files.os.fsync")
    @patch("dotenv_writer.utils.files.os.unlink")
    def test_replaces_target_with_unique_temp_file(self, mock_unlink, mock_fsync, mock_replace, mock_chmod, mock_file, mock_uuid):
        self._fixed_uuid(mock_uuid)
        mock_file.return_value.fileno.return_value = 123

        with patch("dotenv_writer.utils.files.Path.mkdir"):
            with patch("dotenv_writer.utils.files.existing_permissions", return_value=None):
                with atomic_write(self.target, newline="") as f:
                    f.write("A=1\r\n")

        mock_file.assert_called_once_with(self.expected_tmp_path, 'w', encoding='utf-8', newline="")
        mock_fsync.assert_called_once_with(123)
        mock_chmod.assert_called_once_with(self.expected_tmp_path, 0o644)

        args, _ = mock_replace.call_args
        assert args[0] == self.expected_tmp_path
        assert args[1] == self.target
        mock_unlink.assert_not_called()

    @patch("dotenv_writer.utils.files.uuid.uuid4")
    @patch("builtins.open", new_callable=mock_open)
    @patch("dotenv_writer.utils.files.os.chmod")
    @patch("dotenv_writer.utils.files.os.replace")
    @patch("dotenv_writer.utils.files.os.fsync")
    @patch("dotenv_writer.utils.files.os.unlink")
    def test_keeps_permissions_of_existing_target(self, mock_unlink, mock_fsync, mock_replace, mock_chmod, mock_file, mock_uuid):
        self._fixed_uuid(mock_uuid)
        mock_file.return_value.fileno.return_value = 123

        with patch("dotenv_writer.utils.files.Path.mkdir"):
            with patch("dotenv_writer.utils.files.existing_permissions", return_value=0o640):
                with atomic_write(self.target) as f:
                    f.write("A=1\n")

        mock_chmod.assert_called_once_with(self.expected_tmp_path, 0o640)

    @patch("dotenv_writer.utils.files.uuid.uuid4")
    @patch("builtins.open", new_callable=mock_open)
    @patch("dotenv_writer.utils.files.os.chmod")
    @patch("dotenv_writer.utils.files.os.replace")
    @patch("dotenv_writer.utils.files.os.fsync")
    @patch("dotenv_writer.utils.files.os.unlink")
    def test_failure_removes_temp_file_and_keeps_target(self, mock_unlink, mock_fsync, mock_replace, mock_chmod, mock_file, mock_uuid):
        self._fixed_uuid(mock_uuid)
        mock_file.return_value.fileno.return_value = 123

        with patch("dotenv_writer.utils.files.Path.mkdir"):
            with patch("dotenv_writer.utils.files.os.path.exists", return_value=True):
                with pytest.raises(RuntimeError):
                    with atomic_write(self.target, permissions=0o600) as f:
                        raise RuntimeError("boom")

        mock_replace.assert_not_called()
        mock_unlink.assert_called_with(self.expected_tmp_path)
