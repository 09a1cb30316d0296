"""
Хранилище вложений сделок

Каждая сделка получает свою папку <attachments_dir>/<deal_id>.
Удаление терпимо к отсутствию файлов и папок.
"""

import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
from loguru import logger


@dataclass
class Attachment:
    """Файл, приложенный к сделке"""
    name: str
    path: Path


class AttachmentStorage:
    """Файловое хранилище вложений сделок"""

    def __init__(self, base_dir: Path):
        self.base_dir = Path(base_dir)

    def container_path(self, deal_id: int) -> Path:
        return self.base_dir / str(deal_id)

    def ensure_container(self, deal_id: int) -> Path:
        """Создание папки вложений сделки (если ее нет)"""
        path = self.container_path(deal_id)
        path.mkdir(parents=True, exist_ok=True)
        return path

    def list_attachments(self, deal_id: int) -> List[Attachment]:
        """Список вложений сделки; пустой, если папки нет"""
        path = self.container_path(deal_id)
        if not path.is_dir():
            return []
        return [
            Attachment(name=item.name, path=item)
            for item in sorted(path.iterdir())
            if item.is_file()
        ]

    def add_attachment(self, deal_id: int, source: Path) -> Attachment:
        """
        Копирование файла в папку вложений сделки

        Raises:
            FileNotFoundError: Если исходного файла нет
        """
        source = Path(source)
        if not source.is_file():
            raise FileNotFoundError(f"Файл не найден: {source}")
        destination = self.ensure_container(deal_id) / source.name
        shutil.copy2(source, destination)
        logger.info(f"Вложение {source.name} добавлено к сделке {deal_id}")
        return Attachment(name=destination.name, path=destination)

    def delete_attachment(self, file_path: Path) -> bool:
        """Удаление файла вложения; отсутствие файла не ошибка"""
        file_path = Path(file_path)
        if file_path.is_file():
            file_path.unlink()
            logger.info(f"Вложение удалено: {file_path}")
        return True

    def remove_container(self, deal_id: int) -> Optional[Path]:
        """Удаление папки вложений сделки вместе с содержимым"""
        path = self.container_path(deal_id)
        if not path.exists():
            logger.debug(f"Папка вложений сделки {deal_id} отсутствует, удалять нечего")
            return None
        shutil.rmtree(path)
        logger.info(f"Папка вложений сделки {deal_id} удалена")
        return path
