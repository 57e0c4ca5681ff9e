# app/services/record_store.py
"""
컬렉션 단위 레코드 저장소.

도메인 서비스는 이 인터페이스만 사용하며, 실제 저장 방식(메모리, JSON 파일, Firestore)은
설정값 RECORD_STORE_BACKEND에 따라 create_record_store()가 결정합니다.
"""
import copy
import json
import logging
import os
import threading
from abc import ABC, abstractmethod
from typing import Dict, Any, List, Optional


class RecordStore(ABC):
    """식별자(id)를 가진 레코드들의 컬렉션."""

    def __init__(self, collection_name: str):
        self.collection_name = collection_name

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """equality 필터를 적용한 레코드 목록 (created_at 내림차순)."""

    @abstractmethod
    def get(self, record_id: str) -> Optional[Dict[str, Any]]:
        """id로 레코드를 조회합니다. 없으면 None."""

    @abstractmethod
    def insert(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """'id'를 포함한 레코드를 추가합니다."""

    @abstractmethod
    def update(self, record_id: str, fields: Dict[str, Any]) -> bool:
        """필드를 덮어씁니다. 대상이 없으면 False."""

    @abstractmethod
    def delete(self, record_id: str) -> bool:
        """레코드를 삭제합니다. 대상이 없으면 False."""

    @staticmethod
    def _matches(record: Dict[str, Any], filters: Optional[Dict[str, Any]]) -> bool:
        if not filters:
            return True
        return all(record.get(key) == value for key, value in filters.items())

    @staticmethod
    def _newest_first(records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        # created_at은 ISO 문자열(Z)로 저장되므로 문자열 정렬이 시간 순서와 같다
        return sorted(records, key=lambda r: str(r.get('created_at') or ""), reverse=True)


class InMemoryRecordStore(RecordStore):
    """테스트 및 로컬 실행용 메모리 저장소."""

    def __init__(self, collection_name: str):
        super().__init__(collection_name)
        self._records: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def list(self, filters=None):
        with self._lock:
            records = [copy.deepcopy(r) for r in self._records.values() if self._matches(r, filters)]
        return self._newest_first(records)

    def get(self, record_id):
        with self._lock:
            record = self._records.get(record_id)
            return copy.deepcopy(record) if record is not None else None

    def insert(self, record):
        if not record.get('id'):
            raise ValueError("레코드에는 'id'가 필요합니다.")
        with self._lock:
            self._records[record['id']] = copy.deepcopy(record)
        return record

    def update(self, record_id, fields):
        with self._lock:
            if record_id not in self._records:
                return False
            self._records[record_id].update(copy.deepcopy(fields))
            return True

    def delete(self, record_id):
        with self._lock:
            return self._records.pop(record_id, None) is not None


class JsonFileRecordStore(RecordStore):
    """
    컬렉션 전체를 하나의 JSON 파일(<base_dir>/<collection>.json)에 저장하는 저장소.
    쓰기마다 컬렉션 전체를 덮어쓰며, 잠금은 같은 프로세스 안에서만 유효합니다.
    """

    def __init__(self, collection_name: str, base_dir: str):
        super().__init__(collection_name)
        self.path = os.path.join(base_dir, f"{collection_name}.json")
        self._lock = threading.Lock()
        os.makedirs(base_dir, exist_ok=True)

    def _read_all(self) -> List[Dict[str, Any]]:
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logging.error(f"레코드 파일 파싱 실패 ({self.path}): {e}")
            return []
        return data if isinstance(data, list) else []

    def _write_all(self, records: List[Dict[str, Any]]):
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(records, f, ensure_ascii=False, indent=2, default=str)
        os.replace(tmp_path, self.path)

    def list(self, filters=None):
        with self._lock:
            records = [r for r in self._read_all() if self._matches(r, filters)]
        return self._newest_first(records)

    def get(self, record_id):
        with self._lock:
            return next((r for r in self._read_all() if r.get('id') == record_id), None)

    def insert(self, record):
        if not record.get('id'):
            raise ValueError("레코드에는 'id'가 필요합니다.")
        with self._lock:
            records = self._read_all()
            records.append(record)
            self._write_all(records)
        return record

    def update(self, record_id, fields):
        with self._lock:
            records = self._read_all()
            for record in records:
                if record.get('id') == record_id:
                    record.update(fields)
                    self._write_all(records)
                    return True
            return False

    def delete(self, record_id):
        with self._lock:
            records = self._read_all()
            remaining = [r for r in records if r.get('id') != record_id]
            if len(remaining) == len(records):
                return False
            self._write_all(remaining)
            return True


def create_record_store(collection_name: str, config: Dict[str, Any]) -> RecordStore:
    """설정에 따라 컬렉션 저장소 인스턴스를 생성합니다."""
    backend = (config.get('RECORD_STORE_BACKEND') or 'memory').lower()
    if backend == 'memory':
        return InMemoryRecordStore(collection_name)
    if backend == 'file':
        return JsonFileRecordStore(collection_name, config.get('RECORD_STORE_PATH') or 'data')
    if backend == 'firestore':
        from app.services.firestore_service import FirestoreRecordStore
        return FirestoreRecordStore(collection_name)
    raise ValueError(f"지원하지 않는 RECORD_STORE_BACKEND 입니다: {backend}")
